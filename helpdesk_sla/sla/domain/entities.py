"""
SLA Domain Entities
====================

Pure Python domain entities for SLA evaluation.

Tickets and their status history are owned by the ticketing system; the SLA
engine only reads them. Status periods are derived here on every evaluation
and never persisted.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from helpdesk_sla.config import SLAPhase, TicketStatus, sla_phase
from helpdesk_sla.core import InvalidTimestampException, ValidationException

_DATETIME = TypeAdapter(datetime)


def ensure_datetime(value: Any, field_name: str) -> datetime:
    """
    Coerce a datetime or ISO-8601 string into a datetime.

    Raises:
        InvalidTimestampException: if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if value is None or value == "":
        raise InvalidTimestampException(field_name, value)
    try:
        return _DATETIME.validate_python(value)
    except ValidationError as e:
        raise InvalidTimestampException(field_name, value) from e


def optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    """Like ensure_datetime, but None and empty strings stay None."""
    if value is None or value == "":
        return None
    return ensure_datetime(value, field_name)


@dataclass(frozen=True)
class CustomPriority:
    """A per-department priority defined by the company (e.g. "Alta", weight 3)."""

    id: int
    name: str
    weight: Optional[int] = None


PriorityRef = Union[str, int, CustomPriority, None]


@dataclass
class Ticket:
    """
    Ticket entity as seen by the SLA engine.

    Timestamps may be given as datetimes or ISO strings; anything that does
    not parse is rejected, since it points at corrupt upstream data.
    """

    id: str
    created_at: datetime
    status: TicketStatus
    priority: PriorityRef
    company_id: Optional[int] = None
    department_id: Optional[int] = None
    incident_type_id: Optional[int] = None
    category_id: Optional[int] = None
    first_response_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None

    def __post_init__(self):
        self.created_at = ensure_datetime(self.created_at, "created_at")
        self.first_response_at = optional_datetime(self.first_response_at, "first_response_at")
        self.resolved_at = optional_datetime(self.resolved_at, "resolved_at")

        try:
            self.status = TicketStatus(self.status)
        except ValueError as e:
            raise ValidationException(
                f"Unknown ticket status: {self.status!r}",
                {"ticket_id": self.id, "status": str(self.status)}
            ) from e


@dataclass(frozen=True)
class StatusChangeEvent:
    """
    One entry of a ticket's history.

    Kept deliberately loose (raw strings and timestamps) because history comes
    straight from storage; the period reconstructor decides what is usable.
    """

    ticket_id: Optional[str]
    new_status: Optional[str]
    created_at: Any
    old_status: Optional[str] = None
    change_type: Optional[str] = None


@dataclass(frozen=True)
class StatusPeriod:
    """
    An interval during which the ticket kept one status.

    ``end`` is None for the most recent, still-open period. ``is_paused`` is
    True whenever the SLA clock does not accrue time during the interval.
    """

    status: TicketStatus
    start: datetime
    end: Optional[datetime]
    is_paused: bool

    @classmethod
    def for_status(
        cls,
        status: TicketStatus,
        start: datetime,
        end: Optional[datetime] = None
    ) -> "StatusPeriod":
        return cls(
            status=status,
            start=start,
            end=end,
            is_paused=sla_phase(status) is not SLAPhase.ACTIVE,
        )

    @property
    def is_open(self) -> bool:
        return self.end is None

    def end_or(self, until: datetime) -> datetime:
        """The period's end, with an open period closed at ``until``."""
        return until if self.end is None else self.end
