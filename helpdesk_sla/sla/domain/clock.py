"""
SLA Clock
=========

Pure functions computing elapsed and remaining business time for the
response and resolution clocks of a ticket.

Remaining time is signed: a negative value is how much the target has been
exceeded by, and is never clamped.
"""

from datetime import datetime
from typing import Optional, Sequence

from helpdesk_sla.config import SLAPhase, SLAState, SLAType, TicketStatus, sla_phase
from helpdesk_sla.core import SLANotConfiguredException
from helpdesk_sla.sla.domain.calendar import DEFAULT_CALENDAR, BusinessCalendar
from helpdesk_sla.sla.domain.entities import StatusPeriod
from helpdesk_sla.sla.domain.periods import finished_at
from helpdesk_sla.sla.domain.value_objects import (
    SLAClockReading, SLAStatus, SLATarget, SLAThresholds
)

DEFAULT_THRESHOLDS = SLAThresholds()


def accrued_business_hours(
    created_at: datetime,
    until: datetime,
    periods: Sequence[StatusPeriod],
    calendar: BusinessCalendar = DEFAULT_CALENDAR
) -> float:
    """
    Business hours the SLA clock ran between ``created_at`` and ``until``.

    Only non-paused periods count; open periods are closed at ``until`` and
    anything after ``until`` is ignored. Without periods the whole interval
    counts.
    """
    if not periods:
        return calendar.business_hours_between(created_at, until)

    total = 0.0
    for period in periods:
        if period.is_paused:
            continue
        start = max(period.start, created_at)
        end = min(period.end_or(until), until)
        total += calendar.business_hours_between(start, end)
    return total


def read_clock(
    sla_type: SLAType,
    target_hours: float,
    created_at: datetime,
    now: datetime,
    periods: Sequence[StatusPeriod],
    stopped_at: Optional[datetime] = None,
    paused: bool = False,
    calendar: BusinessCalendar = DEFAULT_CALENDAR,
    thresholds: SLAThresholds = DEFAULT_THRESHOLDS,
) -> SLAClockReading:
    """
    Read one SLA clock.

    A clock with ``stopped_at`` (the milestone) is frozen there: fully
    consumed, never overdue, and flagged ``met_late`` if the milestone came
    after the target. A running clock accrues up to ``now``.
    """
    if stopped_at is not None:
        elapsed = accrued_business_hours(created_at, stopped_at, periods, calendar)
        remaining = target_hours - elapsed
        return SLAClockReading(
            sla_type=sla_type,
            target_hours=target_hours,
            elapsed_hours=elapsed,
            time_remaining=remaining,
            percent_consumed=100.0,
            is_overdue=False,
            is_paused=False,
            is_met=True,
            met_late=remaining < 0,
            state=SLAState.MET,
            met_at=stopped_at,
        )

    elapsed = accrued_business_hours(created_at, now, periods, calendar)
    remaining = target_hours - elapsed
    percent = min(100.0, max(0.0, elapsed / target_hours * 100))

    due_at = None
    if not paused and remaining > 0:
        due_at = calendar.add_business_time(now, remaining)

    return SLAClockReading(
        sla_type=sla_type,
        target_hours=target_hours,
        elapsed_hours=elapsed,
        time_remaining=remaining,
        percent_consumed=percent,
        is_overdue=remaining < 0,
        is_paused=paused,
        is_met=False,
        met_late=False,
        state=thresholds.classify(remaining),
        due_at=due_at,
    )


def evaluate_sla(
    created_at: datetime,
    target: Optional[SLATarget],
    now: datetime,
    first_response_at: Optional[datetime] = None,
    resolved_at: Optional[datetime] = None,
    periods: Optional[Sequence[StatusPeriod]] = None,
    current_status: TicketStatus = TicketStatus.NEW,
    calendar: BusinessCalendar = DEFAULT_CALENDAR,
    thresholds: SLAThresholds = DEFAULT_THRESHOLDS,
) -> SLAStatus:
    """
    Evaluate both SLA clocks of a ticket.

    A finished ticket freezes the resolution clock at ``resolved_at`` (or at
    the moment it entered its finished status, or ``now`` as a last resort).
    The response clock freezes at ``first_response_at``; a finished ticket
    that never got one freezes it at the resolution instant.

    ``now`` and the milestones may be naive or aware independently of
    ``created_at``; they are aligned to it on ``calendar``.

    Raises:
        SLANotConfiguredException: if ``target`` is None
    """
    if target is None:
        raise SLANotConfiguredException()

    now = calendar.align(now, created_at)
    if first_response_at is not None:
        first_response_at = calendar.align(first_response_at, created_at)
    if resolved_at is not None:
        resolved_at = calendar.align(resolved_at, created_at)

    periods = list(periods or ())
    phase = sla_phase(current_status)
    paused = phase is SLAPhase.PAUSED

    resolution_stop = None
    if phase is SLAPhase.FINISHED:
        resolution_stop = resolved_at or finished_at(periods) or now

    response_stop = first_response_at or resolution_stop

    common = dict(
        created_at=created_at,
        now=now,
        periods=periods,
        paused=paused,
        calendar=calendar,
        thresholds=thresholds,
    )
    return SLAStatus(
        response=read_clock(
            SLAType.RESPONSE, target.hours_for(SLAType.RESPONSE),
            stopped_at=response_stop, **common
        ),
        resolution=read_clock(
            SLAType.RESOLUTION, target.hours_for(SLAType.RESOLUTION),
            stopped_at=resolution_stop, **common
        ),
        evaluated_at=now,
    )
