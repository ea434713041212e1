"""
SLA Domain Layer
================

Domain layer for SLA computation.

Contains:
- Entities: Ticket, StatusChangeEvent, StatusPeriod
- Value Objects: SLATarget, SLAClockReading, SLAStatus, SLAConfig
- Domain Services: BusinessCalendar, period reconstruction, SLA clock, target resolver

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from helpdesk_sla.sla.domain.calendar import (
    DEFAULT_CALENDAR,
    BusinessCalendar,
    add_business_time,
    business_hours_between,
)
from helpdesk_sla.sla.domain.clock import (
    DEFAULT_THRESHOLDS,
    accrued_business_hours,
    evaluate_sla,
    read_clock,
)
from helpdesk_sla.sla.domain.entities import (
    CustomPriority,
    StatusChangeEvent,
    StatusPeriod,
    Ticket,
)
from helpdesk_sla.sla.domain.periods import build_periods, finished_at
from helpdesk_sla.sla.domain.resolver import (
    CompanyDefaultStrategy,
    CustomConfigurationStrategy,
    DepartmentDefaultStrategy,
    GlobalFallbackStrategy,
    SLAResolutionRequest,
    SLAResolver,
    SLATargetStrategy,
    canonical_priority,
    resolve_sla_target,
)
from helpdesk_sla.sla.domain.value_objects import (
    BusinessHoursConfig,
    CompanySLADefinition,
    CustomSLAConfiguration,
    SLAClockReading,
    SLAConfig,
    SLAStatus,
    SLATarget,
    SLAThresholds,
    SLATimes,
    ThresholdsConfig,
)

__all__ = [
    # Entities
    "Ticket",
    "StatusChangeEvent",
    "StatusPeriod",
    "CustomPriority",
    # Value Objects
    "SLATarget",
    "SLAThresholds",
    "SLAClockReading",
    "SLAStatus",
    "SLATimes",
    "SLAConfig",
    "BusinessHoursConfig",
    "ThresholdsConfig",
    "CustomSLAConfiguration",
    "CompanySLADefinition",
    # Business calendar
    "BusinessCalendar",
    "DEFAULT_CALENDAR",
    "add_business_time",
    "business_hours_between",
    # Periods & clock
    "build_periods",
    "finished_at",
    "accrued_business_hours",
    "read_clock",
    "evaluate_sla",
    "DEFAULT_THRESHOLDS",
    # Resolution
    "SLAResolver",
    "SLAResolutionRequest",
    "SLATargetStrategy",
    "CustomConfigurationStrategy",
    "DepartmentDefaultStrategy",
    "CompanyDefaultStrategy",
    "GlobalFallbackStrategy",
    "canonical_priority",
    "resolve_sla_target",
]
