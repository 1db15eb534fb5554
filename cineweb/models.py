"""Data models for cinema backend records."""

from enum import Enum
from typing import Annotated, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _coerce_id(value):
    # json-server hands out numeric ids for hand-seeded rows
    if value is None or isinstance(value, str):
        return value
    return str(value)


RecordId = Annotated[str, BeforeValidator(_coerce_id)]
Number = Union[int, float]


class TicketType(str, Enum):
    """Admission type sold at the box office."""

    FULL = "INTEIRA"
    HALF = "MEIA"


class Record(BaseModel):
    """Base for records stored by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    id: RecordId | None = None


class Movie(Record):
    """Film catalog entry available for scheduling."""

    id: RecordId
    title: str = Field(alias="titulo")
    synopsis: str = Field(alias="sinopse")
    duration: Number = Field(alias="duracao")  # minutes
    rating: str | None = Field(default=None, alias="classificacao")  # age rating
    genre: str | None = Field(default=None, alias="genero")
    start_date: str | None = Field(default=None, alias="dataInicioExibicao")
    end_date: str | None = Field(default=None, alias="dataFimExibicao")


class Room(Record):
    """Exhibition room."""

    id: RecordId
    number: Number = Field(alias="numero")
    capacity: Number = Field(alias="capacidade")


class Session(Record):
    """Screening of a movie in a room."""

    movie_id: RecordId = Field(alias="filmeId")
    room_id: RecordId = Field(alias="salaId")
    starts_at: str = Field(alias="dataHora")  # as typed, e.g. 2026-01-12T19:30


class Ticket(Record):
    """Admission sold for a session."""

    session_id: RecordId = Field(alias="sessaoId")
    type: TicketType = Field(alias="tipo")
    price: Number = Field(alias="valor")
