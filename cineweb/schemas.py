"""
Validation rules for form drafts.

Each entity has a pydantic schema keyed by the backend's field names and a
closed enum of field identifiers. ``validate()`` never raises for bad input:
it returns a ``ValidationResult`` holding either the normalized value or one
message per failing field (the first violation wins).
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from cineweb.models import Number, TicketType


class MovieField(str, Enum):
    TITLE = "titulo"
    SYNOPSIS = "sinopse"
    DURATION = "duracao"
    RATING = "classificacao"
    GENRE = "genero"
    START_DATE = "dataInicioExibicao"
    END_DATE = "dataFimExibicao"


class RoomField(str, Enum):
    NUMBER = "numero"
    CAPACITY = "capacidade"


class SessionField(str, Enum):
    MOVIE_ID = "filmeId"
    ROOM_ID = "salaId"
    STARTS_AT = "dataHora"


class TicketField(str, Enum):
    SESSION_ID = "sessaoId"
    TYPE = "tipo"
    PRICE = "valor"


# =============================================================================
# FIELD CHECKS
# =============================================================================

def _required_text(value: Any, message: str) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _positive_number(value: Any, not_number: str, not_positive: str) -> Number:
    """Accept numbers or numeric strings (as typed in a form), > 0."""
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValueError(not_number) from None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(not_number)
    try:
        as_float = float(value)
    except OverflowError:
        raise ValueError(not_number) from None
    if math.isnan(as_float) or math.isinf(as_float):
        raise ValueError(not_number)
    if value <= 0:
        raise ValueError(not_positive)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def parse_datetime(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date/time (datetime-local inputs omit seconds)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _not_before(moment: datetime, now: datetime) -> bool:
    # Naive values are wall-clock local time
    if moment.tzinfo is None and now.tzinfo is not None:
        now = now.astimezone().replace(tzinfo=None)
    elif moment.tzinfo is not None and now.tzinfo is None:
        now = now.astimezone()
    return moment >= now


# =============================================================================
# SCHEMAS
# =============================================================================

class DraftSchema(BaseModel):
    """Base for draft schemas. Missing fields run through the field checks."""

    model_config = ConfigDict(populate_by_name=True)

    field_ids: ClassVar[Type[Enum]]


class MovieSchema(DraftSchema):
    field_ids: ClassVar[Type[Enum]] = MovieField

    title: str = Field(default=None, alias="titulo", validate_default=True)
    synopsis: str = Field(default=None, alias="sinopse", validate_default=True)
    duration: Number = Field(default=None, alias="duracao", validate_default=True)
    rating: Optional[str] = Field(default=None, alias="classificacao")
    genre: Optional[str] = Field(default=None, alias="genero")
    start_date: Optional[str] = Field(default=None, alias="dataInicioExibicao")
    end_date: Optional[str] = Field(default=None, alias="dataFimExibicao")

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value):
        return _required_text(value, "Title is required")

    @field_validator("synopsis", mode="before")
    @classmethod
    def _synopsis(cls, value):
        return _required_text(value, "Synopsis is required")

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value):
        return _positive_number(value, "Duration must be a number", "Duration must be greater than 0")

    @field_validator("rating", "genre", "start_date", "end_date", mode="before")
    @classmethod
    def _optional(cls, value):
        return _optional_text(value)


class RoomSchema(DraftSchema):
    field_ids: ClassVar[Type[Enum]] = RoomField

    number: Number = Field(default=None, alias="numero", validate_default=True)
    capacity: Number = Field(default=None, alias="capacidade", validate_default=True)

    @field_validator("number", mode="before")
    @classmethod
    def _number(cls, value):
        return _positive_number(value, "Room number must be a number", "Room number must be greater than 0")

    @field_validator("capacity", mode="before")
    @classmethod
    def _capacity(cls, value):
        return _positive_number(value, "Capacity must be a number", "Capacity must be greater than 0")


class SessionSchema(DraftSchema):
    field_ids: ClassVar[Type[Enum]] = SessionField

    movie_id: str = Field(default=None, alias="filmeId", validate_default=True)
    room_id: str = Field(default=None, alias="salaId", validate_default=True)
    starts_at: str = Field(default=None, alias="dataHora", validate_default=True)

    @field_validator("movie_id", mode="before")
    @classmethod
    def _movie_id(cls, value):
        return _required_text(value, "Select a movie")

    @field_validator("room_id", mode="before")
    @classmethod
    def _room_id(cls, value):
        return _required_text(value, "Select a room")

    @field_validator("starts_at", mode="before")
    @classmethod
    def _starts_at(cls, value, info: ValidationInfo):
        if isinstance(value, datetime):
            value = value.isoformat(timespec="minutes")
        text = _required_text(value, "Enter the session date and time")
        moment = parse_datetime(text)
        if moment is None:
            raise ValueError("Session date and time is not valid")
        now = (info.context or {}).get("now") or datetime.now()
        if not _not_before(moment, now):
            raise ValueError("Session date cannot be in the past")
        return text


class TicketSchema(DraftSchema):
    field_ids: ClassVar[Type[Enum]] = TicketField

    session_id: str = Field(default=None, alias="sessaoId", validate_default=True)
    type: TicketType = Field(default=None, alias="tipo", validate_default=True)
    price: Number = Field(default=None, alias="valor", validate_default=True)

    @field_validator("session_id", mode="before")
    @classmethod
    def _session_id(cls, value):
        return _required_text(value, "Session is required")

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value):
        if isinstance(value, TicketType):
            return value
        allowed = [t.value for t in TicketType]
        if isinstance(value, str) and value in allowed:
            return TicketType(value)
        raise ValueError(f"Ticket type must be one of: {', '.join(allowed)}")

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value):
        return _positive_number(value, "Price must be a number", "Price must be greater than zero")


# =============================================================================
# RESULT
# =============================================================================

S = TypeVar("S", bound=DraftSchema)


@dataclass
class ValidationResult(Generic[S]):
    value: Optional[S] = None
    errors: Dict[Enum, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def payload(self) -> dict:
        """Normalized value as the backend expects it (wire names, no blanks)."""
        if self.value is None:
            raise ValueError("Invalid draft has no payload")
        return self.value.model_dump(by_alias=True, exclude_none=True, mode="json")


def _field_errors(schema: Type[DraftSchema], exc: ValidationError) -> Dict[Enum, str]:
    aliases = {name: info.alias or name for name, info in schema.model_fields.items()}
    errors = {}
    for error in exc.errors():
        if not error["loc"]:
            continue
        wire_name = aliases.get(error["loc"][0], error["loc"][0])
        field_id = schema.field_ids(wire_name)
        if field_id in errors:
            continue
        cause = (error.get("ctx") or {}).get("error")
        errors[field_id] = str(cause) if cause is not None else error["msg"]
    return errors


def validate(schema: Type[S], draft: Mapping[Any, Any], now: datetime = None) -> ValidationResult[S]:
    """Validate a draft keyed by field ids or wire names."""
    data = {getattr(key, "value", key): value for key, value in draft.items()}
    context = {"now": now or datetime.now()}
    try:
        value = schema.model_validate(data, context=context)
    except ValidationError as exc:
        return ValidationResult(errors=_field_errors(schema, exc))
    return ValidationResult(value=value)


def validate_movie(draft: Mapping[Any, Any]) -> ValidationResult[MovieSchema]:
    return validate(MovieSchema, draft)


def validate_room(draft: Mapping[Any, Any]) -> ValidationResult[RoomSchema]:
    return validate(RoomSchema, draft)


def validate_session(draft: Mapping[Any, Any], now: datetime = None) -> ValidationResult[SessionSchema]:
    return validate(SessionSchema, draft, now=now)


def validate_ticket(draft: Mapping[Any, Any]) -> ValidationResult[TicketSchema]:
    return validate(TicketSchema, draft)
