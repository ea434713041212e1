"""
SLA Presentation Helpers
========================

Human-readable labels for SLA readings, consumed by the ticket list and
ticket detail views. Nothing here feeds back into the calculation.
"""

from typing import Optional

from helpdesk_sla.config import SLAState
from helpdesk_sla.sla.domain import SLAStatus

NOT_CONFIGURED_LABEL = "SLA not configured"

_STATE_LABELS = {
    SLAState.OK: "SLA on track",
    SLAState.WARNING: "SLA at risk",
    SLAState.CRITICAL: "SLA critical",
    SLAState.BREACHED: "SLA breached",
}


def _format_hours(hours: float) -> str:
    text = f"{hours:.1f}"
    return text[:-2] if text.endswith(".0") else text


def format_duration(hours: float) -> str:
    """
    Compact duration: "45min", "3h", "3h 30min", "2d 4h".

    Days are 24-hour blocks of the given figure, not calendar days.
    """
    minutes = round(abs(hours) * 60)
    if minutes < 60:
        return f"{minutes}min"

    if minutes < 24 * 60:
        whole, rest = divmod(minutes, 60)
        return f"{whole}h {rest}min" if rest else f"{whole}h"

    days, rest = divmod(minutes, 24 * 60)
    leftover = round(rest / 60)
    if leftover == 24:
        days, leftover = days + 1, 0
    return f"{days}d {leftover}h" if leftover else f"{days}d"


def format_time_remaining(hours: float) -> str:
    """
    Label for a signed remaining-time figure.

    Examples:
        0.75  -> "45min remaining"
        52    -> "2d 4h remaining"
        -3.5  -> "exceeded by 3.5h"
        -0.5  -> "exceeded by 30min"
    """
    if hours < 0:
        overdue = -hours
        if overdue < 1:
            return f"exceeded by {round(overdue * 60)}min"
        return f"exceeded by {_format_hours(overdue)}h"
    return f"{format_duration(hours)} remaining"


def describe_status(status: Optional[SLAStatus]) -> str:
    """Short badge text for a ticket's SLA status."""
    if status is None:
        return NOT_CONFIGURED_LABEL

    resolution = status.resolution
    if resolution.is_met:
        return "Met late" if resolution.met_late else "Met"
    if status.is_any_overdue:
        return _STATE_LABELS[SLAState.BREACHED]
    if status.is_paused:
        return "SLA paused"
    return _STATE_LABELS.get(status.state, _STATE_LABELS[SLAState.OK])
