"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for the SLA module:
- External: YAML config loading and watchdog hot reload
- Repositories: Config providers for the application layer
"""

from helpdesk_sla.sla.infrastructure.external import ConfigFileHandler, SLAConfigManager
from helpdesk_sla.sla.infrastructure.repositories import StaticConfigProvider, YAMLConfigProvider

__all__ = [
    "ConfigFileHandler",
    "SLAConfigManager",
    "YAMLConfigProvider",
    "StaticConfigProvider",
]
