"""
List views: tabular rendering of fetched collections.

Views only read what a page has already loaded. Cross references (a
session's movie and room, a ticket's session) are resolved against those
lists and fall back to a "not found" label instead of failing.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from cineweb import config
from cineweb.models import Movie, Record, Room, Session, Ticket
from cineweb.schemas import parse_datetime

logger = logging.getLogger(__name__)

MOVIE_NOT_FOUND = "Movie not found"
ROOM_NOT_FOUND = "Room not found"
SESSION_NOT_FOUND = "Session not found"

EMPTY_MESSAGES = {
    "movies": "No movies registered.",
    "rooms": "No rooms registered.",
    "sessions": "No sessions scheduled.",
    "tickets": "No tickets sold.",
}

MOVIE_COLUMNS = ["id", "title", "genre", "duration", "rating"]
ROOM_COLUMNS = ["id", "number", "capacity"]
SESSION_COLUMNS = ["id", "movie", "room", "starts_at"]
TICKET_COLUMNS = ["id", "session", "type", "price"]


def find_by_id(records: Sequence[Record], record_id: Optional[str]) -> Optional[Record]:
    if not record_id:
        return None
    return next((r for r in records if r.id == record_id), None)


def format_datetime(value: Optional[str]) -> str:
    """dd/mm/YYYY HH:MM; unparseable values are shown as they are."""
    if not value:
        return ""
    moment = parse_datetime(value)
    if moment is None:
        return value
    return moment.strftime("%d/%m/%Y %H:%M")


def room_label(room: Optional[Room]) -> str:
    return f"Room {room.number}" if room else ROOM_NOT_FOUND


def movie_label(movie: Optional[Movie]) -> str:
    return movie.title if movie else MOVIE_NOT_FOUND


def session_label(session: Optional[Session], movies: Sequence[Movie], rooms: Sequence[Room]) -> str:
    if session is None:
        return SESSION_NOT_FOUND
    movie = find_by_id(movies, session.movie_id)
    room = find_by_id(rooms, session.room_id)
    return f"{movie_label(movie)} | {room_label(room)} | {format_datetime(session.starts_at)}"


def movies_table(movies: Sequence[Movie]) -> pd.DataFrame:
    rows = [
        {
            "id": m.id,
            "title": m.title,
            "genre": m.genre or "",
            "duration": f"{m.duration} min",
            "rating": m.rating or "",
        }
        for m in movies
    ]
    return pd.DataFrame(rows, columns=MOVIE_COLUMNS)


def rooms_table(rooms: Sequence[Room]) -> pd.DataFrame:
    rows = [{"id": r.id, "number": r.number, "capacity": r.capacity} for r in rooms]
    return pd.DataFrame(rows, columns=ROOM_COLUMNS)


def sessions_table(sessions: Sequence[Session], movies: Sequence[Movie], rooms: Sequence[Room]) -> pd.DataFrame:
    rows = []
    for session in sessions:
        movie = find_by_id(movies, session.movie_id)
        room = find_by_id(rooms, session.room_id)
        rows.append({
            "id": session.id or "",
            "movie": movie_label(movie),
            "room": room_label(room),
            "starts_at": format_datetime(session.starts_at),
        })
    return pd.DataFrame(rows, columns=SESSION_COLUMNS)


def tickets_table(tickets: Sequence[Ticket], sessions: Sequence[Session],
                  movies: Sequence[Movie], rooms: Sequence[Room]) -> pd.DataFrame:
    rows = [
        {
            "id": t.id or "",
            "session": session_label(find_by_id(sessions, t.session_id), movies, rooms),
            "type": t.type.value,
            "price": f"{t.price:.2f}",
        }
        for t in tickets
    ]
    return pd.DataFrame(rows, columns=TICKET_COLUMNS)


def render(df: pd.DataFrame, kind: str) -> str:
    """Text rendering of a table, or the empty-list line."""
    if df.empty:
        return EMPTY_MESSAGES[kind]
    return df.to_string(index=False)


def to_csv(df: pd.DataFrame, kind: str, filename: str = None) -> Path:
    """Save a table under OUTPUT_DIR (or to an explicit path)."""
    if filename is None:
        config.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        filepath = config.OUTPUT_DIR / f"{kind}_{datetime.now().strftime('%Y-%m-%d_%H%M%S')}.csv"
    else:
        filepath = Path(filename)
    df.to_csv(filepath, index=False, encoding='utf-8')
    logger.info(f"💾 Saved {len(df)} {kind} to {filepath}")
    return filepath
