"""
SLA Application DTOs
=====================

Data Transfer Objects for SLA API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Following YAGNI - only what's needed.
"""

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from helpdesk_sla.sla.domain import (
    CustomPriority, SLAClockReading, SLAConfig, SLATarget, StatusChangeEvent, Ticket
)
from helpdesk_sla.sla.domain.calendar import MAX_BUSINESS_HOURS


# ========== Type Aliases for Literals ==========
TicketStatusStr = Literal[
    "new", "ongoing", "suspended", "waiting_customer", "escalated",
    "in_analysis", "pending_deployment", "reopened", "resolved", "closed"
]
SLATypeStr = Literal["response", "resolution"]
SLAStateStr = Literal["met", "ok", "warning", "critical", "breached"]
SLASourceStr = Literal["custom", "department_default", "company_default", "global_fallback"]


# ========== Request DTOs ==========

class CustomPriorityDTO(BaseModel):
    """Per-department priority defined by the company."""
    id: int = Field(..., description="Custom priority ID")
    name: str = Field(..., min_length=1, description="Priority name, e.g. 'Alta'")
    weight: Optional[int] = Field(None, ge=1, description="Priority weight (1=low ... 4=critical)")

    def to_domain(self) -> CustomPriority:
        return CustomPriority(id=self.id, name=self.name, weight=self.weight)


PriorityDTO = Union[CustomPriorityDTO, int, str, None]


def _priority_to_domain(priority: PriorityDTO):
    if isinstance(priority, CustomPriorityDTO):
        return priority.to_domain()
    return priority


class StatusChangeDTO(BaseModel):
    """
    One ticket history entry.

    Kept loose on purpose: unknown statuses and unparseable timestamps are
    skipped during evaluation instead of failing the request.
    """
    new_status: Optional[str] = Field(None, description="Status after the change")
    old_status: Optional[str] = Field(None, description="Status before the change")
    created_at: Union[datetime, str, None] = Field(None, description="When the change happened")
    change_type: Optional[str] = Field(
        None,
        description="status, priority, assignment or department; missing means status"
    )

    def to_domain(self, ticket_id: str) -> StatusChangeEvent:
        return StatusChangeEvent(
            ticket_id=ticket_id,
            new_status=self.new_status,
            old_status=self.old_status,
            created_at=self.created_at,
            change_type=self.change_type,
        )


class TicketDTO(BaseModel):
    """Ticket attributes the SLA engine reads."""
    id: str = Field(..., min_length=1, description="Ticket ID")
    created_at: datetime = Field(..., description="Ticket creation timestamp")
    status: TicketStatusStr = Field(default="new", description="Current ticket status")
    priority: PriorityDTO = Field(
        None,
        description="Priority name (any language), custom priority ID, or custom priority object"
    )
    company_id: Optional[int] = None
    department_id: Optional[int] = None
    incident_type_id: Optional[int] = None
    category_id: Optional[int] = None
    first_response_at: Optional[datetime] = Field(None, description="First response time")
    resolved_at: Optional[datetime] = Field(None, description="Resolution time")

    def to_domain(self) -> Ticket:
        """Convert to domain entity."""
        return Ticket(
            id=self.id,
            created_at=self.created_at,
            status=self.status,
            priority=_priority_to_domain(self.priority),
            company_id=self.company_id,
            department_id=self.department_id,
            incident_type_id=self.incident_type_id,
            category_id=self.category_id,
            first_response_at=self.first_response_at,
            resolved_at=self.resolved_at,
        )


class TicketEvaluationItem(BaseModel):
    """A ticket together with its status-change history."""
    ticket: TicketDTO
    history: List[StatusChangeDTO] = Field(default_factory=list)

    def history_to_domain(self) -> List[StatusChangeEvent]:
        return [event.to_domain(self.ticket.id) for event in self.history]


class EvaluateTicketRequest(TicketEvaluationItem):
    """Request model for single-ticket evaluation."""
    now: Optional[datetime] = Field(None, description="Evaluation instant (defaults to server time)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "ticket": {
                    "id": "TKT-1042",
                    "created_at": "2025-03-03T08:00:00",
                    "status": "ongoing",
                    "priority": "Alta",
                    "company_id": 1,
                    "department_id": 3,
                    "incident_type_id": 7,
                },
                "history": [
                    {"old_status": "new", "new_status": "ongoing",
                     "created_at": "2025-03-03T09:00:00", "change_type": "status"}
                ],
                "now": "2025-03-04T10:00:00",
            }
        }
    }


class BatchEvaluateRequest(BaseModel):
    """Request model for evaluating several tickets at one instant."""
    items: List[TicketEvaluationItem] = Field(..., description="Tickets to evaluate")
    now: Optional[datetime] = Field(None, description="Shared evaluation instant")


class ResolveTargetRequest(BaseModel):
    """Request model for SLA target lookup."""
    company_id: Optional[int] = None
    department_id: Optional[int] = None
    incident_type_id: Optional[int] = None
    category_id: Optional[int] = None
    priority: PriorityDTO = None

    def priority_to_domain(self):
        return _priority_to_domain(self.priority)


class AddBusinessTimeRequest(BaseModel):
    """Request model for business-time addition."""
    start: datetime
    hours: float = Field(..., ge=0, le=MAX_BUSINESS_HOURS, description="Business hours to add")
    company_id: Optional[int] = Field(None, description="Use this company's calendar")


class BusinessTimeBetweenRequest(BaseModel):
    """Request model for business time between two instants."""
    start: datetime
    end: datetime
    company_id: Optional[int] = Field(None, description="Use this company's calendar")


# ========== Response DTOs ==========

class SLAClockResponse(BaseModel):
    """Response model for one SLA clock."""
    sla_type: SLATypeStr
    target_hours: float
    elapsed_hours: float
    time_remaining: float = Field(..., description="Signed business hours; negative means exceeded")
    percent_consumed: float = Field(..., ge=0, le=100)
    is_overdue: bool
    is_paused: bool
    is_met: bool
    met_late: bool = Field(..., description="Milestone reached after the target")
    state: SLAStateStr
    met_at: Optional[datetime] = None
    due_at: Optional[datetime] = Field(None, description="Projected deadline while the clock runs")

    @classmethod
    def from_domain(cls, reading: SLAClockReading) -> "SLAClockResponse":
        return cls(
            sla_type=reading.sla_type.value,
            target_hours=reading.target_hours,
            elapsed_hours=round(reading.elapsed_hours, 4),
            time_remaining=round(reading.time_remaining, 4),
            percent_consumed=round(reading.percent_consumed, 2),
            is_overdue=reading.is_overdue,
            is_paused=reading.is_paused,
            is_met=reading.is_met,
            met_late=reading.met_late,
            state=reading.state.value,
            met_at=reading.met_at,
            due_at=reading.due_at,
        )


class SLATargetResponse(BaseModel):
    """Response model for a resolved SLA target."""
    configured: bool = Field(..., description="False when no SLA applies")
    source: Optional[SLASourceStr] = None
    config_id: Optional[int] = None
    response_time_hours: Optional[float] = None
    resolution_time_hours: Optional[float] = None

    @classmethod
    def from_domain(cls, target: Optional[SLATarget]) -> "SLATargetResponse":
        if target is None:
            return cls(configured=False)
        return cls(
            configured=True,
            source=target.source.value,
            config_id=target.config_id,
            response_time_hours=target.response_time_hours,
            resolution_time_hours=target.resolution_time_hours,
        )


class TicketSLAResponse(BaseModel):
    """Response model for ticket SLA information."""
    ticket_id: str
    configured: bool = Field(..., description="False when no SLA applies to the ticket")
    target: SLATargetResponse
    response: Optional[SLAClockResponse] = Field(None, description="Response SLA clock")
    resolution: Optional[SLAClockResponse] = Field(None, description="Resolution SLA clock")
    overall_state: Optional[SLAStateStr] = Field(None, description="Most severe clock state")
    percent_consumed: Optional[float] = Field(None, description="Resolution clock consumption")
    is_paused: bool = False
    label: str = Field(..., description="Badge text, e.g. 'SLA paused'")
    time_remaining_label: Optional[str] = Field(None, description="e.g. '3h remaining'")
    evaluated_at: datetime

    @classmethod
    def from_result(cls, result) -> "TicketSLAResponse":
        """Create from an application TicketSLAResult."""
        status = result.status
        return cls(
            ticket_id=result.ticket_id,
            configured=result.configured,
            target=SLATargetResponse.from_domain(result.target),
            response=SLAClockResponse.from_domain(status.response) if status else None,
            resolution=SLAClockResponse.from_domain(status.resolution) if status else None,
            overall_state=status.state.value if status else None,
            percent_consumed=round(status.percent_consumed, 2) if status else None,
            is_paused=status.is_paused if status else False,
            label=result.label,
            time_remaining_label=result.time_remaining_label,
            evaluated_at=result.evaluated_at,
        )


class BatchEvaluateResponse(BaseModel):
    """Response model for batch evaluation."""
    results: List[TicketSLAResponse]
    total_count: int
    breached_count: int = Field(..., description="Tickets with an overdue clock")
    not_configured_count: int


class BusinessTimeResponse(BaseModel):
    """Response model for business-time addition."""
    start: datetime
    hours: float
    result: datetime


class BusinessHoursResponse(BaseModel):
    """Response model for business time between two instants."""
    start: datetime
    end: datetime
    business_hours: float


class BusinessHoursConfigResponse(BaseModel):
    start_hour: int
    end_hour: int
    work_days: List[int]
    timezone: Optional[str] = None
    holidays: List[str] = Field(default_factory=list)


class SLAConfigResponse(BaseModel):
    """Response model for the active SLA configuration summary."""
    business_hours: BusinessHoursConfigResponse
    company_calendars: List[int] = Field(..., description="Companies with their own business hours")
    warning_hours: float
    critical_hours: float
    custom_configurations: int
    company_defaults: int
    fallback: dict

    @classmethod
    def from_domain(cls, config: SLAConfig) -> "SLAConfigResponse":
        hours = config.business_hours
        return cls(
            business_hours=BusinessHoursConfigResponse(
                start_hour=hours.start_hour,
                end_hour=hours.end_hour,
                work_days=hours.work_days,
                timezone=hours.timezone,
                holidays=[day.isoformat() for day in hours.holidays],
            ),
            company_calendars=sorted(config.company_business_hours),
            warning_hours=config.thresholds.warning_hours,
            critical_hours=config.thresholds.critical_hours,
            custom_configurations=len(config.configurations),
            company_defaults=len(config.company_defaults),
            fallback={name: times.model_dump() for name, times in config.fallback.items()},
        )
