"""
SLA Target Resolution
=====================

Finds the SLA target for a ticket by walking an ordered chain of strategies,
most specific first:

1. Custom configuration (company + department + incident type + category + priority)
2. Department default (same, without a priority)
3. Legacy company default (company + priority name)
4. Global fallback (canonical priority levels)

Each strategy returns an SLATarget or None, so each layer can be tested on
its own. Only a ticket without any priority information, or with a priority
no layer understands, ends up unconfigured.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from helpdesk_sla.config import Priority, SLASource
from helpdesk_sla.sla.domain.entities import CustomPriority, PriorityRef
from helpdesk_sla.sla.domain.value_objects import (
    CustomSLAConfiguration, SLAConfig, SLATarget
)
from helpdesk_sla.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


# ========== Priority normalization ==========

PRIORITY_ALIASES = {
    "low": Priority.LOW,
    "baixa": Priority.LOW,
    "medium": Priority.MEDIUM,
    "média": Priority.MEDIUM,
    "media": Priority.MEDIUM,
    "high": Priority.HIGH,
    "alta": Priority.HIGH,
    "critical": Priority.CRITICAL,
    "crítica": Priority.CRITICAL,
    "critica": Priority.CRITICAL,
}

PRIORITY_WEIGHTS = {
    1: Priority.LOW,
    2: Priority.MEDIUM,
    3: Priority.HIGH,
    4: Priority.CRITICAL,
}


def has_priority(priority: PriorityRef) -> bool:
    if priority is None or isinstance(priority, bool):
        return False
    if isinstance(priority, str):
        return bool(priority.strip())
    return True


def priority_name(priority: PriorityRef) -> Optional[str]:
    """Human name of a priority reference, if it carries one."""
    if isinstance(priority, CustomPriority):
        return priority.name
    if isinstance(priority, str) and priority.strip():
        return priority.strip()
    return None


def priority_id(priority: PriorityRef) -> Optional[int]:
    """Custom-priority id of a priority reference, if it carries one."""
    if isinstance(priority, CustomPriority):
        return priority.id
    if isinstance(priority, int) and not isinstance(priority, bool):
        return priority
    return None


def canonical_priority(priority: PriorityRef) -> Optional[Priority]:
    """
    Map a priority reference to one of the four canonical levels.

    Names are matched case-insensitively in English and Portuguese; bare
    numbers and custom priorities without a known name use their weight (1-4).
    """
    name = priority_name(priority)
    if name is not None:
        canonical = PRIORITY_ALIASES.get(name.lower())
        if canonical is not None:
            return canonical

    if isinstance(priority, CustomPriority):
        return PRIORITY_WEIGHTS.get(priority.weight)
    if priority_id(priority) is not None:
        return PRIORITY_WEIGHTS.get(priority)
    return None


def priority_names_match(configured: str, requested: Optional[str]) -> bool:
    """Case-insensitive match that also treats 'high' and 'Alta' as equal."""
    if requested is None:
        return False
    if configured.strip().lower() == requested.strip().lower():
        return True
    configured_level = PRIORITY_ALIASES.get(configured.strip().lower())
    return configured_level is not None and configured_level is PRIORITY_ALIASES.get(requested.strip().lower())


# ========== Request ==========

@dataclass(frozen=True)
class SLAResolutionRequest:
    """The ticket attributes that select an SLA target."""

    company_id: Optional[int]
    department_id: Optional[int]
    incident_type_id: Optional[int]
    category_id: Optional[int]
    priority: PriorityRef

    @property
    def lookup_names(self) -> List[str]:
        """Priority names for name-keyed layers; the canonical level is tried last."""
        names = []
        name = priority_name(self.priority)
        if name is not None:
            names.append(name)
        canonical = canonical_priority(self.priority)
        if canonical is not None and canonical.value not in names:
            names.append(canonical.value)
        return names


# ========== Strategies ==========

class SLATargetStrategy(ABC):
    """One layer of the resolution chain."""

    source: SLASource

    @abstractmethod
    def resolve(self, request: SLAResolutionRequest, config: SLAConfig) -> Optional[SLATarget]:
        """Return a target, or None to let the next layer try."""

    def _target(self, configuration) -> SLATarget:
        return SLATarget(
            response_time_hours=configuration.response_time_hours,
            resolution_time_hours=configuration.resolution_time_hours,
            source=self.source,
            config_id=getattr(configuration, "id", None),
        )


def _department_configurations(
    request: SLAResolutionRequest,
    configurations: Iterable[CustomSLAConfiguration]
) -> List[CustomSLAConfiguration]:
    return [
        c for c in configurations
        if c.is_active
        and c.company_id == request.company_id
        and c.department_id == request.department_id
        and c.incident_type_id == request.incident_type_id
    ]


def _prefer_category(
    request: SLAResolutionRequest,
    candidates: Sequence[CustomSLAConfiguration]
) -> Optional[CustomSLAConfiguration]:
    """A category-specific match wins over an incident-type-wide one."""
    if request.category_id is not None:
        for candidate in candidates:
            if candidate.category_id == request.category_id:
                return candidate
    for candidate in candidates:
        if candidate.category_id is None:
            return candidate
    return None


class CustomConfigurationStrategy(SLATargetStrategy):
    """Per-department configuration for an explicit priority."""

    source = SLASource.CUSTOM

    def resolve(self, request: SLAResolutionRequest, config: SLAConfig) -> Optional[SLATarget]:
        requested_id = priority_id(request.priority)
        requested_name = priority_name(request.priority)

        def matches(configuration: CustomSLAConfiguration) -> bool:
            if configuration.priority_id is not None and configuration.priority_id == requested_id:
                return True
            return bool(configuration.priority) and priority_names_match(configuration.priority, requested_name)

        candidates = [
            c for c in _department_configurations(request, config.configurations)
            if c.has_priority and matches(c)
        ]
        match = _prefer_category(request, candidates)
        return self._target(match) if match else None


class DepartmentDefaultStrategy(SLATargetStrategy):
    """Per-department configuration that applies to every priority."""

    source = SLASource.DEPARTMENT_DEFAULT

    def resolve(self, request: SLAResolutionRequest, config: SLAConfig) -> Optional[SLATarget]:
        candidates = [
            c for c in _department_configurations(request, config.configurations)
            if not c.has_priority
        ]
        match = _prefer_category(request, candidates)
        return self._target(match) if match else None


class CompanyDefaultStrategy(SLATargetStrategy):
    """Legacy flat table keyed by company and priority name."""

    source = SLASource.COMPANY_DEFAULT

    def resolve(self, request: SLAResolutionRequest, config: SLAConfig) -> Optional[SLATarget]:
        if request.company_id is None:
            return None

        definitions = [d for d in config.company_defaults if d.company_id == request.company_id]
        for name in request.lookup_names:
            for definition in definitions:
                if priority_names_match(definition.priority, name):
                    return self._target(definition)
        return None


class GlobalFallbackStrategy(SLATargetStrategy):
    """Hardcoded defaults for the four canonical priority levels."""

    source = SLASource.GLOBAL_FALLBACK

    def resolve(self, request: SLAResolutionRequest, config: SLAConfig) -> Optional[SLATarget]:
        canonical = canonical_priority(request.priority)
        if canonical is None:
            return None
        times = config.fallback.get(canonical.value)
        return self._target(times) if times else None


DEFAULT_STRATEGIES = (
    CustomConfigurationStrategy(),
    DepartmentDefaultStrategy(),
    CompanyDefaultStrategy(),
    GlobalFallbackStrategy(),
)


class SLAResolver:
    """
    Chain of responsibility over SLA target strategies.

    Never raises: a failing layer is logged and skipped.
    """

    def __init__(self, strategies: Sequence[SLATargetStrategy] = DEFAULT_STRATEGIES):
        self._strategies = tuple(strategies)

    def resolve(self, request: SLAResolutionRequest, config: SLAConfig) -> Optional[SLATarget]:
        if not has_priority(request.priority):
            logger.debug(
                "No priority information, SLA not configured",
                extra={"company_id": request.company_id, "department_id": request.department_id}
            )
            return None

        for strategy in self._strategies:
            try:
                target = strategy.resolve(request, config)
            except Exception as e:
                logger.warning(
                    "SLA strategy failed, trying next layer",
                    extra={"strategy": type(strategy).__name__, "error": str(e)}
                )
                continue

            if target is not None:
                logger.debug(
                    "SLA target resolved",
                    extra={
                        "source": target.source.value,
                        "config_id": target.config_id,
                        "company_id": request.company_id,
                        "department_id": request.department_id,
                        "incident_type_id": request.incident_type_id,
                    }
                )
                return target

        logger.debug(
            "No SLA layer matched the ticket priority",
            extra={"priority": str(request.priority), "company_id": request.company_id}
        )
        return None


def resolve_sla_target(
    company_id: Optional[int],
    department_id: Optional[int],
    incident_type_id: Optional[int],
    category_id: Optional[int],
    priority: PriorityRef,
    config: Optional[SLAConfig] = None,
    resolver: Optional[SLAResolver] = None,
) -> Optional[SLATarget]:
    """Resolve the SLA target for a ticket; None means 'SLA not configured'."""
    request = SLAResolutionRequest(
        company_id=company_id,
        department_id=department_id,
        incident_type_id=incident_type_id,
        category_id=category_id,
        priority=priority,
    )
    return (resolver or SLAResolver()).resolve(request, config or SLAConfig())
