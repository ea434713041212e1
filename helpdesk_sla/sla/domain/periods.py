"""
Status-Period Reconstruction
============================

Turns a ticket's raw status-change history into contiguous status periods,
each flagged as running or paused for the SLA clock.

Bad history never raises: unusable events are skipped, and with nothing
usable the whole lifetime becomes one running period.
"""

from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple

from helpdesk_sla.config import ChangeType, SLAPhase, TicketStatus, sla_phase
from helpdesk_sla.core import InvalidTimestampException
from helpdesk_sla.sla.domain.calendar import DEFAULT_CALENDAR, BusinessCalendar
from helpdesk_sla.sla.domain.entities import StatusChangeEvent, StatusPeriod, ensure_datetime
from helpdesk_sla.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _status_transitions(
    created_at: datetime,
    history: Iterable[Any],
    calendar: BusinessCalendar,
) -> List[Tuple[datetime, TicketStatus]]:
    """Usable (timestamp, new status) pairs, stably sorted by timestamp."""
    transitions = []

    for event in history or ():
        change_type = getattr(event, "change_type", None)
        if change_type is not None and change_type != ChangeType.STATUS:
            continue

        raw_status = getattr(event, "new_status", None)
        try:
            status = TicketStatus(raw_status)
        except ValueError:
            logger.debug("Skipping history event with unknown status", extra={"new_status": raw_status})
            continue

        try:
            at = ensure_datetime(getattr(event, "created_at", None), "created_at")
        except InvalidTimestampException:
            logger.warning("Skipping history event with invalid timestamp", extra={"new_status": raw_status})
            continue

        at = max(calendar.align(at, created_at), created_at)
        transitions.append((at, status))

    # sorted() is stable: events sharing a timestamp keep their input order
    return sorted(transitions, key=lambda item: item[0])


def build_periods(
    created_at: datetime,
    current_status: TicketStatus,
    history: Optional[Iterable[StatusChangeEvent]] = None,
    initial_status: TicketStatus = TicketStatus.NEW,
    calendar: BusinessCalendar = DEFAULT_CALENDAR,
) -> List[StatusPeriod]:
    """
    Reconstruct the status periods of a ticket.

    Periods are contiguous, start at ``created_at`` and are ordered in time.
    The last one is open (``end`` is None) unless the ticket is finished and
    its final status change moved it into that finished state, in which case
    the clock is frozen and no open period is returned.

    Args:
        created_at: Ticket creation instant
        current_status: Status the ticket has now
        history: Status-change events, in any order
        initial_status: Status the ticket was created with
        calendar: Calendar used to read event timestamps whose naive or
            aware form differs from ``created_at``

    Returns:
        List of StatusPeriod
    """
    periods: List[StatusPeriod] = []
    period_start = created_at
    period_status = initial_status

    for at, status in _status_transitions(created_at, history, calendar):
        if at > period_start:
            periods.append(StatusPeriod.for_status(period_status, period_start, at))
        period_start = at
        period_status = status

    finished = sla_phase(current_status) is SLAPhase.FINISHED
    if not (finished and sla_phase(period_status) is SLAPhase.FINISHED):
        periods.append(StatusPeriod.for_status(period_status, period_start))

    if not periods:
        # Finished at the very instant of creation
        periods.append(StatusPeriod.for_status(initial_status, created_at, created_at))

    return periods


def finished_at(periods: List[StatusPeriod]) -> Optional[datetime]:
    """
    Instant the ticket entered its final finished status, if the periods
    end with a frozen clock.
    """
    if periods and not periods[-1].is_open:
        return periods[-1].end
    return None
