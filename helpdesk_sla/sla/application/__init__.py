"""
SLA Application Layer
======================

Application layer for the SLA module.

Contains:
- Services: Orchestrate evaluation and resolution against the active configuration
- DTOs: Data transfer objects for API serialization
- Presentation: Human-readable SLA labels

This layer depends on the domain layer and the config provider interface,
but not on concrete infrastructure implementations.
"""

from helpdesk_sla.sla.application.dto import (
    AddBusinessTimeRequest,
    BatchEvaluateRequest,
    BatchEvaluateResponse,
    BusinessHoursResponse,
    BusinessTimeBetweenRequest,
    BusinessTimeResponse,
    CustomPriorityDTO,
    EvaluateTicketRequest,
    ResolveTargetRequest,
    SLAClockResponse,
    SLAConfigResponse,
    SLATargetResponse,
    StatusChangeDTO,
    TicketDTO,
    TicketEvaluationItem,
    TicketSLAResponse,
)
from helpdesk_sla.sla.application.presentation import (
    describe_status,
    format_duration,
    format_time_remaining,
)
from helpdesk_sla.sla.application.services import (
    ISLAConfigProvider,
    SLAService,
    TicketSLAResult,
)

__all__ = [
    # DTOs
    "CustomPriorityDTO",
    "StatusChangeDTO",
    "TicketDTO",
    "TicketEvaluationItem",
    "EvaluateTicketRequest",
    "BatchEvaluateRequest",
    "ResolveTargetRequest",
    "AddBusinessTimeRequest",
    "BusinessTimeBetweenRequest",
    "SLAClockResponse",
    "SLATargetResponse",
    "TicketSLAResponse",
    "BatchEvaluateResponse",
    "BusinessTimeResponse",
    "BusinessHoursResponse",
    "SLAConfigResponse",
    # Presentation
    "format_duration",
    "format_time_remaining",
    "describe_status",
    # Services
    "SLAService",
    "TicketSLAResult",
    # Provider Interfaces
    "ISLAConfigProvider",
]
