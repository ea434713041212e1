"""
Configuration Module
====================

Application settings and shared constants, managed with Pydantic.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="helpdesk-sla", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== SLA Configuration ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to SLA configuration YAML file"
    )
    sla_config_watch: bool = Field(
        default=True,
        description="Reload the SLA configuration file when it changes"
    )

    # ========== Business Hours (defaults when YAML is silent) ==========
    business_start_hour: int = Field(default=8, ge=0, le=23, description="Business window opening hour")
    business_end_hour: int = Field(default=18, ge=1, le=24, description="Business window closing hour")
    business_work_days: List[int] = Field(
        default=[0, 1, 2, 3, 4],
        description="Working weekdays (Monday=0 ... Sunday=6)"
    )
    business_timezone: Optional[str] = Field(
        default=None,
        description="IANA time zone of the business window (e.g. America/Sao_Paulo)"
    )

    # ========== SLA Thresholds ==========
    sla_warning_hours: float = Field(
        default=8.0,
        description="Remaining business hours below which an SLA is 'warning'",
        gt=0
    )
    sla_critical_hours: float = Field(
        default=2.0,
        description="Remaining business hours below which an SLA is 'critical'",
        gt=0
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("business_work_days")
    @classmethod
    def validate_work_days(cls, v: List[int]) -> List[int]:
        if not v or any(day < 0 or day > 6 for day in v):
            raise ValueError("business_work_days must be a non-empty list of weekdays 0-6")
        return sorted(set(v))

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        if self.business_start_hour >= self.business_end_hour:
            raise ValueError("business_start_hour must be before business_end_hour")
        if self.sla_critical_hours > self.sla_warning_hours:
            raise ValueError("sla_critical_hours cannot exceed sla_warning_hours")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class TicketStatus(str, Enum):
    """Ticket lifecycle statuses."""
    NEW = "new"
    ONGOING = "ongoing"
    SUSPENDED = "suspended"
    WAITING_CUSTOMER = "waiting_customer"
    ESCALATED = "escalated"
    IN_ANALYSIS = "in_analysis"
    PENDING_DEPLOYMENT = "pending_deployment"
    REOPENED = "reopened"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SLAPhase(str, Enum):
    """How a ticket status affects the SLA clock."""
    ACTIVE = "active"        # clock accrues time
    PAUSED = "paused"        # clock stopped, waiting on someone else
    FINISHED = "finished"    # clock frozen for good


# One entry per TicketStatus; tests assert the table is exhaustive.
STATUS_SLA_PHASE: Dict[TicketStatus, SLAPhase] = {
    TicketStatus.NEW: SLAPhase.ACTIVE,
    TicketStatus.ONGOING: SLAPhase.ACTIVE,
    TicketStatus.ESCALATED: SLAPhase.ACTIVE,
    TicketStatus.IN_ANALYSIS: SLAPhase.ACTIVE,
    TicketStatus.REOPENED: SLAPhase.ACTIVE,
    TicketStatus.SUSPENDED: SLAPhase.PAUSED,
    TicketStatus.WAITING_CUSTOMER: SLAPhase.PAUSED,
    TicketStatus.PENDING_DEPLOYMENT: SLAPhase.PAUSED,
    TicketStatus.RESOLVED: SLAPhase.FINISHED,
    TicketStatus.CLOSED: SLAPhase.FINISHED,
}


def sla_phase(status: TicketStatus) -> SLAPhase:
    """Classify a ticket status for the SLA clock."""
    return STATUS_SLA_PHASE[TicketStatus(status)]


class Priority(str, Enum):
    """Canonical (legacy) ticket priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ChangeType(str, Enum):
    """Kinds of ticket history entries."""
    STATUS = "status"
    PRIORITY = "priority"
    ASSIGNMENT = "assignment"
    DEPARTMENT = "department"


class SLAType(str, Enum):
    """Types of SLA clocks."""
    RESPONSE = "response"
    RESOLUTION = "resolution"


class SLAState(str, Enum):
    """Coarse SLA states, ordered by severity."""
    MET = "met"
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    BREACHED = "breached"


class SLASource(str, Enum):
    """Configuration layer that supplied an SLA target."""
    CUSTOM = "custom"
    DEPARTMENT_DEFAULT = "department_default"
    COMPANY_DEFAULT = "company_default"
    GLOBAL_FALLBACK = "global_fallback"


# ========== Lists for validation ==========

VALID_PRIORITIES = [priority.value for priority in Priority]
SLA_STATE_SEVERITY = {
    SLAState.MET: 0,
    SLAState.OK: 1,
    SLAState.WARNING: 2,
    SLAState.CRITICAL: 3,
    SLAState.BREACHED: 4,
}
