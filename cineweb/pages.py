"""
Pages: one object per screen, owning its slice of state.

A page holds the last successfully fetched lists and its form controllers.
Loaders catch gateway failures, log them and keep the previous lists, so a
failed fetch never leaves a page half-updated.
"""

import asyncio
import logging
from typing import Callable, List, Optional

import pandas as pd

from cineweb import views
from cineweb.forms import MovieForm, Notify, RoomForm, SessionForm, TicketSaleForm, log_notify
from cineweb.gateway.base import BaseGateway, GatewayError
from cineweb.models import Movie, Room, Session, Ticket

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


async def _gather(*fetches) -> list:
    """Run fetches concurrently; wait for all of them, then raise the first failure."""
    results = await asyncio.gather(*fetches, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class Page:
    """Base page: a gateway, a loader and a rendered table."""

    kind = ""

    def __init__(self, gateway: BaseGateway, notify: Notify = None):
        self.gateway = gateway
        self.notify = notify or log_notify
        self.load_failure: Optional[GatewayError] = None

    async def _fetch(self):
        raise NotImplementedError

    async def load(self) -> bool:
        """Re-fetch the page's lists. Returns False (lists untouched) on failure."""
        try:
            await self._fetch()
        except GatewayError as e:
            logger.error(f"Error loading {self.kind}: {e}")
            self.load_failure = e
            return False
        self.load_failure = None
        return True

    def table(self) -> pd.DataFrame:
        raise NotImplementedError

    def render(self) -> str:
        return views.render(self.table(), self.kind)

    def export(self, filename: str = None):
        return views.to_csv(self.table(), self.kind, filename)


class MoviesPage(Page):
    kind = "movies"

    def __init__(self, gateway: BaseGateway, notify: Notify = None, confirm: Confirm = None):
        super().__init__(gateway, notify=notify)
        self.confirm = confirm or (lambda message: True)
        self.movies: List[Movie] = []
        self.form = MovieForm(gateway, on_success=self.load, notify=self.notify)
        self.last_failure: Optional[GatewayError] = None

    async def _fetch(self):
        self.movies = await self.gateway.get_movies()

    def table(self) -> pd.DataFrame:
        return views.movies_table(self.movies)

    async def delete_movie(self, movie_id: Optional[str]) -> bool:
        """Delete after confirmation, then re-fetch. Returns True when deleted."""
        if not movie_id:
            return False
        if not self.confirm("Are you sure you want to delete this movie?"):
            return False

        self.last_failure = None
        try:
            await self.gateway.delete_movie(movie_id)
        except GatewayError as e:
            logger.error(f"Error deleting movie {movie_id}: {e}")
            self.last_failure = e
            await self.load()
            return False

        await self.load()
        return True


class RoomsPage(Page):
    kind = "rooms"

    def __init__(self, gateway: BaseGateway, notify: Notify = None):
        super().__init__(gateway, notify=notify)
        self.rooms: List[Room] = []
        self.form = RoomForm(gateway, on_success=self.load, notify=self.notify)

    async def _fetch(self):
        self.rooms = await self.gateway.get_rooms()

    def table(self) -> pd.DataFrame:
        return views.rooms_table(self.rooms)


class SessionsPage(Page):
    """Sessions list, the scheduling form and the ticket-sale panel."""

    kind = "sessions"

    def __init__(self, gateway: BaseGateway, notify: Notify = None, clock=None):
        super().__init__(gateway, notify=notify)
        self.movies: List[Movie] = []
        self.rooms: List[Room] = []
        self.sessions: List[Session] = []
        self.form = SessionForm(gateway, on_success=self.load, notify=self.notify, clock=clock)
        self.sale = TicketSaleForm(gateway, notify=self.notify)

    async def _fetch(self):
        movies, rooms, sessions = await _gather(
            self.gateway.get_movies(),
            self.gateway.get_rooms(),
            self.gateway.get_sessions(),
        )
        self.movies, self.rooms, self.sessions = movies, rooms, sessions

    def table(self) -> pd.DataFrame:
        return views.sessions_table(self.sessions, self.movies, self.rooms)

    def open_sale(self, session_id: str) -> bool:
        """Open the ticket-sale panel for a loaded session."""
        session = views.find_by_id(self.sessions, session_id)
        if session is None:
            self.notify(f"Session {session_id} not found.")
            return False
        return self.sale.open(session)

    def sale_summary(self) -> str:
        """Movie, room and time of the session being sold."""
        if not self.sale.is_open:
            return ""
        session = self.sale.session
        movie = views.find_by_id(self.movies, session.movie_id)
        room = views.find_by_id(self.rooms, session.room_id)
        return "\n".join([
            f"Movie: {movie.title if movie else 'Not found'}",
            f"Room: {room.number if room else 'Not found'}",
            f"Date/time: {views.format_datetime(session.starts_at)}",
        ])


class TicketsPage(Page):
    """Sold tickets, labelled with their session."""

    kind = "tickets"

    def __init__(self, gateway: BaseGateway, notify: Notify = None):
        super().__init__(gateway, notify=notify)
        self.tickets: List[Ticket] = []
        self.sessions: List[Session] = []
        self.movies: List[Movie] = []
        self.rooms: List[Room] = []

    async def _fetch(self):
        tickets, sessions, movies, rooms = await _gather(
            self.gateway.get_tickets(),
            self.gateway.get_sessions(),
            self.gateway.get_movies(),
            self.gateway.get_rooms(),
        )
        self.tickets, self.sessions, self.movies, self.rooms = tickets, sessions, movies, rooms

    def table(self) -> pd.DataFrame:
        return views.tickets_table(self.tickets, self.sessions, self.movies, self.rooms)
