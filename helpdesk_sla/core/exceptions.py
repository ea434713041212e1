"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Any, Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class InvalidTimestampException(ValidationException):
    """Raised when a timestamp input cannot be parsed."""

    def __init__(self, field_name: str, value: Any, details: Optional[dict] = None):
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Invalid timestamp for '{field_name}': {value!r}",
            details or {"field": field_name, "value": str(value)}
        )


class SLANotConfiguredException(DomainException):
    """Raised when the SLA clock is asked to run without a target."""

    def __init__(self, ticket_id: Optional[str] = None, details: Optional[dict] = None):
        self.ticket_id = ticket_id
        message = "SLA not configured"
        if ticket_id:
            message += f" for ticket {ticket_id}"
        super().__init__(message, details or {"ticket_id": ticket_id})


class BusinessTimeRangeException(ValidationException):
    """Raised when business-time arithmetic would leave the supported range."""
