"""Base gateway interface and errors."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Type

from cineweb.models import Movie, Record, Room, Session, Ticket


class Resource(str, Enum):
    """Backend collections, valued by their URL path segment."""

    MOVIES = "filmes"
    ROOMS = "salas"
    SESSIONS = "sessoes"
    TICKETS = "ingressos"

    @property
    def record_type(self) -> Type[Record]:
        return RECORD_TYPES[self]


RECORD_TYPES = {
    Resource.MOVIES: Movie,
    Resource.ROOMS: Room,
    Resource.SESSIONS: Session,
    Resource.TICKETS: Ticket,
}


class GatewayError(Exception):
    """A backend operation failed."""

    status_code: Optional[int] = None


class NetworkError(GatewayError):
    """The backend could not be reached (timeout, DNS, connection refused)."""


class ApiError(GatewayError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str = ""):
        super().__init__(f"HTTP error: {status_code} {url}".rstrip())
        self.status_code = status_code
        self.url = url


class InvalidResponseError(GatewayError):
    """The backend answered 2xx with a body that is not the expected record(s)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BaseGateway(ABC):
    """Abstract access to the cinema backend."""

    @abstractmethod
    async def list(self, resource: Resource) -> List[Record]:
        """Fetch every record of a collection, in backend order."""
        ...

    @abstractmethod
    async def create(self, resource: Resource, payload: dict) -> Record:
        """Create a record from a payload without id; returns it with its id."""
        ...

    @abstractmethod
    async def delete(self, resource: Resource, record_id: str) -> None:
        """Delete a record by id."""
        ...

    # Per-entity shortcuts

    async def get_movies(self) -> List[Movie]:
        return await self.list(Resource.MOVIES)

    async def create_movie(self, payload: dict) -> Movie:
        return await self.create(Resource.MOVIES, payload)

    async def delete_movie(self, movie_id: str) -> None:
        await self.delete(Resource.MOVIES, movie_id)

    async def get_rooms(self) -> List[Room]:
        return await self.list(Resource.ROOMS)

    async def create_room(self, payload: dict) -> Room:
        return await self.create(Resource.ROOMS, payload)

    async def get_sessions(self) -> List[Session]:
        return await self.list(Resource.SESSIONS)

    async def create_session(self, payload: dict) -> Session:
        return await self.create(Resource.SESSIONS, payload)

    async def get_tickets(self) -> List[Ticket]:
        return await self.list(Resource.TICKETS)

    async def create_ticket(self, payload: dict) -> Ticket:
        return await self.create(Resource.TICKETS, payload)
