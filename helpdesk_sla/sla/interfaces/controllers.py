"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA computation endpoints.

Controllers are thin - they delegate to application services.
"""

from fastapi import APIRouter, Depends, Request

from helpdesk_sla.sla.application import (
    AddBusinessTimeRequest,
    BatchEvaluateRequest,
    BatchEvaluateResponse,
    BusinessHoursResponse,
    BusinessTimeBetweenRequest,
    BusinessTimeResponse,
    EvaluateTicketRequest,
    ResolveTargetRequest,
    SLAConfigResponse,
    SLAService,
    SLATargetResponse,
    TicketSLAResponse,
)
from helpdesk_sla.shared.infrastructure.logging import get_context_logger

router = APIRouter(prefix="/sla", tags=["SLA"])


# ========== Example payloads for Swagger ==========

TICKET_SLA_RESPONSE_EXAMPLE = {
    "ticket_id": "TKT-1042",
    "configured": True,
    "target": {
        "configured": True,
        "source": "company_default",
        "config_id": 12,
        "response_time_hours": 4.0,
        "resolution_time_hours": 24.0
    },
    "response": {
        "sla_type": "response",
        "target_hours": 4.0,
        "elapsed_hours": 1.0,
        "time_remaining": 3.0,
        "percent_consumed": 100.0,
        "is_overdue": False,
        "is_paused": False,
        "is_met": True,
        "met_late": False,
        "state": "met",
        "met_at": "2025-03-03T09:00:00",
        "due_at": None
    },
    "resolution": {
        "sla_type": "resolution",
        "target_hours": 24.0,
        "elapsed_hours": 12.0,
        "time_remaining": 12.0,
        "percent_consumed": 50.0,
        "is_overdue": False,
        "is_paused": False,
        "is_met": False,
        "met_late": False,
        "state": "ok",
        "met_at": None,
        "due_at": "2025-03-05T12:00:00"
    },
    "overall_state": "ok",
    "percent_consumed": 50.0,
    "is_paused": False,
    "label": "SLA on track",
    "time_remaining_label": "12h remaining",
    "evaluated_at": "2025-03-04T10:00:00"
}


# ========== Dependencies ==========

def get_sla_service(request: Request) -> SLAService:
    """Get the SLA service created at application startup."""
    return request.app.state.sla_service


# ========== Route Handlers ==========

@router.post(
    "/evaluate",
    response_model=TicketSLAResponse,
    summary="Evaluate ticket SLA",
    description="""
    Compute the response and resolution SLA status of one ticket.

    **Clock rules**:
    - Only business hours count (default Monday-Friday, 08:00-18:00)
    - `suspended`, `waiting_customer` and `pending_deployment` pause the clock
    - `resolved` and `closed` freeze it

    The history is the ticket's status-change log; unknown statuses and
    malformed entries are ignored. A ticket with no applicable SLA returns
    `configured: false` rather than an error.
    """,
    responses={
        200: {
            "description": "Ticket SLA status",
            "content": {
                "application/json": {
                    "example": TICKET_SLA_RESPONSE_EXAMPLE
                }
            }
        },
        422: {
            "description": "Invalid ticket payload or timestamp"
        }
    }
)
async def evaluate_ticket(
    request: EvaluateTicketRequest,
    sla_service: SLAService = Depends(get_sla_service)
):
    result = sla_service.evaluate_ticket(
        request.ticket.to_domain(),
        request.history_to_domain(),
        now=request.now,
    )
    return TicketSLAResponse.from_result(result)


@router.post(
    "/evaluate/batch",
    response_model=BatchEvaluateResponse,
    summary="Evaluate SLA for several tickets",
    description="""
    Evaluate a list of tickets against one shared evaluation instant, as the
    ticket list view does. Results keep the request order.
    """
)
async def evaluate_batch(
    request: BatchEvaluateRequest,
    http_request: Request,
    sla_service: SLAService = Depends(get_sla_service)
):
    request_logger = get_context_logger(__name__, getattr(http_request.state, "correlation_id", None))
    items = [
        (item.ticket.to_domain(), item.history_to_domain())
        for item in request.items
    ]
    results = sla_service.evaluate_many(items, now=request.now)

    breached = sum(1 for r in results if r.status is not None and r.status.is_any_overdue)
    not_configured = sum(1 for r in results if not r.configured)

    request_logger.info(
        "Batch SLA evaluation complete",
        extra={
            "tickets": len(results),
            "breached": breached,
            "not_configured": not_configured
        }
    )

    return BatchEvaluateResponse(
        results=[TicketSLAResponse.from_result(r) for r in results],
        total_count=len(results),
        breached_count=breached,
        not_configured_count=not_configured,
    )


@router.post(
    "/resolve",
    response_model=SLATargetResponse,
    summary="Resolve SLA target",
    description="""
    Look up the SLA target for a company, department, incident type, category
    and priority.

    **Resolution order**: custom configuration, department default, company
    default, global fallback. Priority names are matched case-insensitively in
    English and Portuguese (`high` / `Alta`).
    """
)
async def resolve_target(
    request: ResolveTargetRequest,
    sla_service: SLAService = Depends(get_sla_service)
):
    target = sla_service.resolve_target(
        request.company_id,
        request.department_id,
        request.incident_type_id,
        request.category_id,
        request.priority_to_domain(),
    )
    return SLATargetResponse.from_domain(target)


@router.post(
    "/business-time/add",
    response_model=BusinessTimeResponse,
    summary="Add business hours to an instant"
)
async def add_business_time(
    request: AddBusinessTimeRequest,
    sla_service: SLAService = Depends(get_sla_service)
):
    result = sla_service.add_business_time(request.start, request.hours, request.company_id)
    return BusinessTimeResponse(start=request.start, hours=request.hours, result=result)


@router.post(
    "/business-time/between",
    response_model=BusinessHoursResponse,
    summary="Business hours between two instants"
)
async def business_time_between(
    request: BusinessTimeBetweenRequest,
    sla_service: SLAService = Depends(get_sla_service)
):
    hours = sla_service.business_hours_between(request.start, request.end, request.company_id)
    return BusinessHoursResponse(start=request.start, end=request.end, business_hours=round(hours, 4))


@router.get(
    "/config",
    response_model=SLAConfigResponse,
    summary="Active SLA configuration summary"
)
async def get_config(sla_service: SLAService = Depends(get_sla_service)):
    return SLAConfigResponse.from_domain(sla_service.config)


# Export router for inclusion in main app
sla_router = router
