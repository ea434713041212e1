"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain objects and the configuration provider.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (config provider), not concrete implementations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from helpdesk_sla.sla.application.presentation import describe_status, format_time_remaining
from helpdesk_sla.sla.domain import (
    BusinessCalendar,
    SLAConfig,
    SLAResolutionRequest,
    SLAResolver,
    SLAStatus,
    SLATarget,
    StatusChangeEvent,
    Ticket,
    build_periods,
    evaluate_sla,
)
from helpdesk_sla.sla.domain.entities import PriorityRef
from helpdesk_sla.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


# ========== Provider Interfaces (Dependency Inversion) ==========

class ISLAConfigProvider(ABC):
    """Interface for SLA configuration access."""

    @abstractmethod
    def get_config(self) -> SLAConfig:
        """Get current SLA configuration."""


# ========== Results ==========

@dataclass(frozen=True)
class TicketSLAResult:
    """
    Outcome of evaluating one ticket.

    ``target`` and ``status`` are None when no SLA layer applies to the
    ticket; that is a normal result, not an error.
    """

    ticket_id: str
    target: Optional[SLATarget]
    status: Optional[SLAStatus]
    evaluated_at: datetime

    @property
    def configured(self) -> bool:
        return self.target is not None

    @property
    def label(self) -> str:
        return describe_status(self.status)

    @property
    def time_remaining_label(self) -> Optional[str]:
        """Label for the clock that still matters: resolution, unless it is frozen."""
        if self.status is None:
            return None
        resolution = self.status.resolution
        if resolution.is_met:
            return None
        return format_time_remaining(resolution.time_remaining)


# ========== Application Services ==========

class SLAService:
    """
    Service for SLA evaluation of tickets.

    Reads the current configuration on every call so that hot-reloaded
    changes apply immediately; nothing derived is cached.
    """

    def __init__(
        self,
        config_provider: ISLAConfigProvider,
        resolver: Optional[SLAResolver] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._config_provider = config_provider
        self._resolver = resolver or SLAResolver()
        self._clock = clock

    @property
    def config(self) -> SLAConfig:
        return self._config_provider.get_config()

    def calendar_for(self, company_id: Optional[int] = None) -> BusinessCalendar:
        return self.config.calendar_for(company_id)

    # ========== Resolution ==========

    def resolve_target(
        self,
        company_id: Optional[int],
        department_id: Optional[int],
        incident_type_id: Optional[int],
        category_id: Optional[int],
        priority: PriorityRef,
    ) -> Optional[SLATarget]:
        """Resolve the SLA target; None means the ticket has no SLA."""
        request = SLAResolutionRequest(
            company_id=company_id,
            department_id=department_id,
            incident_type_id=incident_type_id,
            category_id=category_id,
            priority=priority,
        )
        return self._resolver.resolve(request, self.config)

    # ========== Evaluation ==========

    def evaluate_ticket(
        self,
        ticket: Ticket,
        history: Optional[Iterable[StatusChangeEvent]] = None,
        now: Optional[datetime] = None,
    ) -> TicketSLAResult:
        """
        Evaluate both SLA clocks of a ticket.

        Args:
            ticket: Ticket to evaluate
            history: Its status-change events, in any order
            now: Evaluation instant (sampled from the clock if omitted)

        Returns:
            TicketSLAResult, unconfigured when no target applies
        """
        config = self.config
        calendar = config.calendar_for(ticket.company_id)
        now = calendar.align(now or self._clock(), ticket.created_at)

        target = self.resolve_target(
            ticket.company_id,
            ticket.department_id,
            ticket.incident_type_id,
            ticket.category_id,
            ticket.priority,
        )
        if target is None:
            logger.debug("SLA not configured for ticket", extra={"ticket_id": ticket.id})
            return TicketSLAResult(ticket_id=ticket.id, target=None, status=None, evaluated_at=now)

        periods = build_periods(ticket.created_at, ticket.status, history, calendar=calendar)
        status = evaluate_sla(
            created_at=ticket.created_at,
            target=target,
            now=now,
            first_response_at=ticket.first_response_at,
            resolved_at=ticket.resolved_at,
            periods=periods,
            current_status=ticket.status,
            calendar=calendar,
            thresholds=config.get_thresholds(),
        )

        logger.debug(
            "SLA evaluated",
            extra={
                "ticket_id": ticket.id,
                "source": target.source.value,
                "state": status.state.value,
                "periods": len(periods),
            }
        )
        return TicketSLAResult(ticket_id=ticket.id, target=target, status=status, evaluated_at=now)

    def evaluate_many(
        self,
        items: Sequence[Tuple[Ticket, Optional[Iterable[StatusChangeEvent]]]],
        now: Optional[datetime] = None,
    ) -> List[TicketSLAResult]:
        """
        Evaluate several tickets against one shared ``now``.

        Tickets are independent; the results keep the input order.
        """
        now = now or self._clock()
        with log_latency(logger, "sla_batch_evaluation", tickets=len(items)):
            return [self.evaluate_ticket(ticket, history, now) for ticket, history in items]

    # ========== Business time ==========

    def add_business_time(
        self,
        start: datetime,
        hours: float,
        company_id: Optional[int] = None
    ) -> datetime:
        return self.calendar_for(company_id).add_business_time(start, hours)

    def business_hours_between(
        self,
        start: datetime,
        end: datetime,
        company_id: Optional[int] = None
    ) -> float:
        return self.calendar_for(company_id).business_hours_between(start, end)
