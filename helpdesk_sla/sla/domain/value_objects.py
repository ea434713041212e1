"""
SLA Value Objects
==================

Immutable value objects for the SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from helpdesk_sla.config import (
    SLA_STATE_SEVERITY, VALID_PRIORITIES, SLASource, SLAState, SLAType
)
from helpdesk_sla.sla.domain.calendar import MAX_BUSINESS_HOURS, BusinessCalendar


@dataclass(frozen=True)
class SLATarget:
    """Response and resolution targets, in business hours, for one ticket."""

    response_time_hours: float
    resolution_time_hours: float
    source: SLASource
    config_id: Optional[int] = None

    def __post_init__(self):
        if self.response_time_hours <= 0 or self.resolution_time_hours <= 0:
            raise ValueError("SLA target hours must be positive")

    def hours_for(self, sla_type: SLAType) -> float:
        if sla_type is SLAType.RESPONSE:
            return self.response_time_hours
        return self.resolution_time_hours


@dataclass(frozen=True)
class SLAThresholds:
    """Remaining-time thresholds for the coarse SLA state."""

    warning_hours: float = 8.0
    critical_hours: float = 2.0

    def classify(self, time_remaining: float) -> SLAState:
        """
        Map remaining business hours to a state.

        Boundaries are strict: exactly ``warning_hours`` left is still OK.
        """
        if time_remaining < 0:
            return SLAState.BREACHED
        if time_remaining < self.critical_hours:
            return SLAState.CRITICAL
        if time_remaining < self.warning_hours:
            return SLAState.WARNING
        return SLAState.OK


@dataclass(frozen=True)
class SLAClockReading:
    """State of one SLA clock (response or resolution) at evaluation time."""

    sla_type: SLAType
    target_hours: float
    elapsed_hours: float
    time_remaining: float
    percent_consumed: float
    is_overdue: bool
    is_paused: bool
    is_met: bool
    met_late: bool
    state: SLAState
    met_at: Optional[datetime] = None
    due_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "sla_type": self.sla_type.value,
            "target_hours": self.target_hours,
            "elapsed_hours": self.elapsed_hours,
            "time_remaining": self.time_remaining,
            "percent_consumed": self.percent_consumed,
            "is_overdue": self.is_overdue,
            "is_paused": self.is_paused,
            "is_met": self.is_met,
            "met_late": self.met_late,
            "state": self.state.value,
            "met_at": self.met_at.isoformat() if self.met_at else None,
            "due_at": self.due_at.isoformat() if self.due_at else None,
        }


@dataclass(frozen=True)
class SLAStatus:
    """SLA status of a ticket: both clocks plus the combined view."""

    response: SLAClockReading
    resolution: SLAClockReading
    evaluated_at: datetime = field(compare=False)

    @property
    def state(self) -> SLAState:
        """The more severe of the two clock states."""
        return max(
            (self.response.state, self.resolution.state),
            key=SLA_STATE_SEVERITY.__getitem__
        )

    @property
    def percent_consumed(self) -> float:
        return self.resolution.percent_consumed

    @property
    def is_paused(self) -> bool:
        return self.response.is_paused or self.resolution.is_paused

    @property
    def is_any_overdue(self) -> bool:
        return self.response.is_overdue or self.resolution.is_overdue

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "response": self.response.to_dict(),
            "resolution": self.resolution.to_dict(),
            "overall": {
                "state": self.state.value,
                "percent_consumed": self.percent_consumed,
                "is_paused": self.is_paused,
                "is_any_overdue": self.is_any_overdue,
            },
            "evaluated_at": self.evaluated_at.isoformat(),
        }


# ========== Configuration (loaded from YAML) ==========

class SLATimes(BaseModel):
    """Response/resolution pair shared by every configuration layer."""
    response_time_hours: float = Field(
        gt=0, le=MAX_BUSINESS_HOURS, description="Business hours to first response"
    )
    resolution_time_hours: float = Field(
        gt=0, le=MAX_BUSINESS_HOURS, description="Business hours to resolution"
    )

    @model_validator(mode="after")
    def validate_order(self) -> "SLATimes":
        if self.response_time_hours >= self.resolution_time_hours:
            raise ValueError("response_time_hours must be lower than resolution_time_hours")
        return self


class CustomSLAConfiguration(SLATimes):
    """
    Fine-grained SLA configuration for one department.

    ``category_id`` None means the department configures SLA per incident
    type; ``priority_id``/``priority`` both None makes it the department
    default for that incident type.
    """
    id: Optional[int] = None
    company_id: int
    department_id: int
    incident_type_id: int
    category_id: Optional[int] = None
    priority_id: Optional[int] = None
    priority: Optional[str] = None
    is_active: bool = True

    @property
    def has_priority(self) -> bool:
        return self.priority_id is not None or bool(self.priority)


class CompanySLADefinition(SLATimes):
    """Legacy company-wide SLA keyed by priority name."""
    id: Optional[int] = None
    company_id: int
    priority: str = Field(min_length=1)


DEFAULT_FALLBACK_TIMES = {
    "low": {"response_time_hours": 24, "resolution_time_hours": 48},
    "medium": {"response_time_hours": 8, "resolution_time_hours": 24},
    "high": {"response_time_hours": 4, "resolution_time_hours": 8},
    "critical": {"response_time_hours": 1, "resolution_time_hours": 4},
}


class BusinessHoursConfig(BaseModel):
    """Business window as written in configuration."""
    start_hour: int = Field(default=8, ge=0, le=23)
    end_hour: int = Field(default=18, ge=1, le=24)
    work_days: List[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4])
    timezone: Optional[str] = Field(default=None, description="IANA time zone name")
    holidays: List[date] = Field(default_factory=list)

    @field_validator("work_days")
    @classmethod
    def validate_work_days(cls, v: List[int]) -> List[int]:
        if not v or any(day < 0 or day > 6 for day in v):
            raise ValueError("work_days must be a non-empty list of weekdays 0-6")
        return sorted(set(v))

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_window(self) -> "BusinessHoursConfig":
        if self.start_hour >= self.end_hour:
            raise ValueError("start_hour must be before end_hour")
        return self

    def to_calendar(self) -> BusinessCalendar:
        return BusinessCalendar.build(
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            work_days=self.work_days,
            tz=ZoneInfo(self.timezone) if self.timezone else None,
            holidays=self.holidays,
        )


class ThresholdsConfig(BaseModel):
    """Remaining-hours thresholds as written in configuration."""
    warning_hours: float = Field(default=8.0, gt=0)
    critical_hours: float = Field(default=2.0, gt=0)

    @model_validator(mode="after")
    def validate_order(self) -> "ThresholdsConfig":
        if self.critical_hours > self.warning_hours:
            raise ValueError("critical_hours cannot exceed warning_hours")
        return self

    def to_thresholds(self) -> SLAThresholds:
        return SLAThresholds(
            warning_hours=self.warning_hours,
            critical_hours=self.critical_hours
        )


class SLAConfig(BaseModel):
    """
    SLA configuration loaded from YAML.

    Layers, most specific first: ``configurations`` (per department),
    ``company_defaults`` (legacy per company and priority) and ``fallback``
    (per canonical priority).
    """
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    company_business_hours: Dict[int, BusinessHoursConfig] = Field(default_factory=dict)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    configurations: List[CustomSLAConfiguration] = Field(default_factory=list)
    company_defaults: List[CompanySLADefinition] = Field(default_factory=list)
    fallback: Dict[str, SLATimes] = Field(
        default_factory=lambda: {
            name: SLATimes(**times) for name, times in DEFAULT_FALLBACK_TIMES.items()
        }
    )

    @field_validator("fallback")
    @classmethod
    def validate_fallback(cls, v: Dict[str, SLATimes]) -> Dict[str, SLATimes]:
        """Fallback keys must be canonical priorities; missing ones get defaults."""
        normalized = {key.lower(): times for key, times in v.items()}
        unknown = set(normalized) - set(VALID_PRIORITIES)
        if unknown:
            raise ValueError(f"Unknown fallback priorities: {sorted(unknown)}")
        for priority in VALID_PRIORITIES:
            if priority not in normalized:
                normalized[priority] = SLATimes(**DEFAULT_FALLBACK_TIMES[priority])
        return normalized

    def calendar_for(self, company_id: Optional[int] = None) -> BusinessCalendar:
        """Business calendar of a company, or the global one."""
        hours = self.company_business_hours.get(company_id, self.business_hours)
        return hours.to_calendar()

    def get_thresholds(self) -> SLAThresholds:
        return self.thresholds.to_thresholds()
