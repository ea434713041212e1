"""
SLA Configuration Providers
===========================

Concrete implementations of the ISLAConfigProvider interface.
"""

from helpdesk_sla.sla.application.services import ISLAConfigProvider
from helpdesk_sla.sla.domain.value_objects import SLAConfig
from helpdesk_sla.sla.infrastructure.external import SLAConfigManager


class YAMLConfigProvider(ISLAConfigProvider):
    """
    SLA configuration provider backed by the YAML config manager.

    Always returns the manager's current configuration, so hot reloads
    are picked up on the next call.
    """

    def __init__(self, config_manager: SLAConfigManager):
        self._config_manager = config_manager

    def get_config(self) -> SLAConfig:
        """Get current SLA configuration."""
        return self._config_manager.config


class StaticConfigProvider(ISLAConfigProvider):
    """In-memory configuration, for library use and tests."""

    def __init__(self, config: SLAConfig = None):
        self._config = config or SLAConfig()

    def get_config(self) -> SLAConfig:
        return self._config
