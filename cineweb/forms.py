"""
Form controllers
================

One controller per entity form. Each owns its draft, its error map and its
status:

    IDLE -> EDITING -> SUBMITTING -> IDLE      (record created, draft reset)
                                  -> EDITING   (invalid draft or backend failure)

An invalid draft never reaches the gateway. Backend failures are logged and
kept on the state; the draft is preserved so the user can retry.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Type

from cineweb.gateway.base import BaseGateway, GatewayError, Resource
from cineweb.models import Record, Session, TicketType
from cineweb.schemas import (
    DraftSchema,
    MovieField,
    MovieSchema,
    RoomField,
    RoomSchema,
    SessionField,
    SessionSchema,
    TicketField,
    TicketSchema,
    ValidationResult,
    validate,
)

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[None]]
Notify = Callable[[str], None]


class FormStatus(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"


@dataclass
class FormState:
    draft: Dict[Enum, Any]
    errors: Dict[Enum, str] = field(default_factory=dict)
    status: FormStatus = FormStatus.IDLE
    failure: Optional[GatewayError] = None


def log_notify(message: str):
    logger.warning(message)


class FormController:
    """Base controller: edit fields, validate on submit, create, refresh."""

    schema: Type[DraftSchema]
    resource: Resource
    initial_draft: Dict[Enum, Any] = {}
    label = "record"

    def __init__(self, gateway: BaseGateway, on_success: Refresh = None, notify: Notify = None):
        self.gateway = gateway
        self.on_success = on_success
        self.notify = notify or log_notify
        self.state = FormState(draft=dict(self.initial_draft))

    @property
    def draft(self) -> Dict[Enum, Any]:
        return self.state.draft

    @property
    def errors(self) -> Dict[Enum, str]:
        return self.state.errors

    @property
    def can_submit(self) -> bool:
        return self.state.status != FormStatus.SUBMITTING

    def set_field(self, name, value):
        """Update one draft field (enum member or wire name) and clear its error."""
        field_id = self.schema.field_ids(name)
        self.state.draft[field_id] = value
        self.state.errors.pop(field_id, None)
        self.state.status = FormStatus.EDITING

    def reset(self):
        self.state = FormState(draft=dict(self.initial_draft))

    def validate(self) -> ValidationResult:
        return validate(self.schema, self.state.draft)

    async def submit(self) -> Optional[Record]:
        """Validate and create the record. Returns it, or None when nothing was created."""
        if not self.can_submit:
            logger.warning(f"The {self.label} form is already being submitted")
            return None

        self.state.status = FormStatus.SUBMITTING
        self.state.failure = None
        try:
            return await self._validate_and_create()
        finally:
            # Never left SUBMITTING, whatever escaped
            if self.state.status is FormStatus.SUBMITTING:
                self.state.status = FormStatus.EDITING

    async def _validate_and_create(self) -> Optional[Record]:
        result = self.validate()
        if not result.ok:
            self.state.errors = result.errors
            self.state.status = FormStatus.EDITING
            return None

        try:
            record = await self.gateway.create(self.resource, result.payload())
        except GatewayError as e:
            logger.error(f"Error creating {self.label}: {e}")
            self.state.failure = e
            self.state.status = FormStatus.EDITING
            self._on_failure(e)
            return None

        self.reset()
        self._on_created(record)
        if self.on_success is not None:
            await self.on_success()
        return record

    def _on_created(self, record: Record):
        pass

    def _on_failure(self, error: GatewayError):
        pass


class MovieForm(FormController):
    schema = MovieSchema
    resource = Resource.MOVIES
    label = "movie"
    initial_draft = {
        MovieField.TITLE: "",
        MovieField.SYNOPSIS: "",
        MovieField.DURATION: 0,
        MovieField.RATING: "",
        MovieField.GENRE: "",
        MovieField.START_DATE: "",
        MovieField.END_DATE: "",
    }


class RoomForm(FormController):
    schema = RoomSchema
    resource = Resource.ROOMS
    label = "room"
    initial_draft = {
        RoomField.NUMBER: 0,
        RoomField.CAPACITY: 0,
    }


class SessionForm(FormController):
    schema = SessionSchema
    resource = Resource.SESSIONS
    label = "session"
    initial_draft = {
        SessionField.MOVIE_ID: "",
        SessionField.ROOM_ID: "",
        SessionField.STARTS_AT: "",
    }

    def __init__(self, gateway: BaseGateway, on_success: Refresh = None, notify: Notify = None,
                 clock: Callable[[], datetime] = None):
        super().__init__(gateway, on_success=on_success, notify=notify)
        self.clock = clock or datetime.now

    def validate(self) -> ValidationResult:
        return validate(self.schema, self.state.draft, now=self.clock())


class TicketSaleForm(FormController):
    """
    Sells a ticket for the session selected in the sessions list.

    The sale panel is open while ``session`` is set. Opening seeds the draft
    with the session id and a full-price ticket; cancelling drops the draft
    without touching the backend. Outcomes are acknowledged via ``notify``.
    """

    schema = TicketSchema
    resource = Resource.TICKETS
    label = "ticket"
    initial_draft = {
        TicketField.SESSION_ID: "",
        TicketField.TYPE: TicketType.FULL.value,
        TicketField.PRICE: 0,
    }

    def __init__(self, gateway: BaseGateway, on_success: Refresh = None, notify: Notify = None):
        super().__init__(gateway, on_success=on_success, notify=notify)
        self.session: Optional[Session] = None

    @property
    def is_open(self) -> bool:
        return self.session is not None

    def open(self, session: Session) -> bool:
        if not self.can_submit:
            logger.warning("A ticket sale is being submitted; wait before opening another")
            return False
        if not session.id:
            self.notify("Invalid session (no id).")
            return False
        self.session = session
        self.state = FormState(draft={**self.initial_draft, TicketField.SESSION_ID: session.id})
        return True

    def cancel(self) -> bool:
        if not self.can_submit:
            logger.warning("A ticket sale is being submitted; it cannot be cancelled")
            return False
        self.session = None
        self.reset()
        return True

    def set_field(self, name, value):
        if self.schema.field_ids(name) is TicketField.SESSION_ID:
            raise ValueError("The session of a sale is fixed when the sale is opened")
        super().set_field(name, value)

    async def submit(self) -> Optional[Record]:
        if self.session is None or not self.session.id:
            self.notify("Select a valid session.")
            return None
        self.state.draft[TicketField.SESSION_ID] = self.session.id
        return await super().submit()

    def _on_created(self, record: Record):
        self.session = None
        self.notify("Ticket registered successfully!")

    def _on_failure(self, error: GatewayError):
        self.notify(f"Could not register the ticket: {error}")
