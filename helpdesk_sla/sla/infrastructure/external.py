"""
SLA Configuration File Integration
==================================

Loads the SLA configuration from YAML and hot-reloads it with watchdog.

A broken file on startup is fatal (ConfigurationException); a broken file
during a hot reload is logged and the previous configuration stays active.
"""

import threading
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from helpdesk_sla.config import Settings, get_settings
from helpdesk_sla.core import ConfigurationException
from helpdesk_sla.sla.domain.value_objects import SLAConfig
from helpdesk_sla.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA config file changes."""

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def _is_config_file(self, path: str) -> bool:
        return Path(path).resolve() == self.config_path.resolve()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if self._is_config_file(event.src_path):
            logger.info("Config file changed", extra={"path": event.src_path})
            self.config_manager.reload()

    def on_created(self, event):
        self.on_modified(event)

    def on_moved(self, event):
        """Editors often save by renaming a temp file over the original."""
        if not event.is_directory and self._is_config_file(event.dest_path):
            logger.info("Config file replaced", extra={"path": event.dest_path})
            self.config_manager.reload()


class SLAConfigManager:
    """
    Thread-safe SLA configuration manager with hot-reload support.

    Uses watchdog to monitor file changes and reload configuration
    without restarting the service. Sections missing from the YAML fall
    back to the business hours and thresholds in Settings.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._config: Optional[SLAConfig] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def _defaults(self) -> Dict[str, Any]:
        """Configuration sections derived from Settings."""
        s = self._settings
        return {
            "business_hours": {
                "start_hour": s.business_start_hour,
                "end_hour": s.business_end_hour,
                "work_days": s.business_work_days,
                "timezone": s.business_timezone,
            },
            "thresholds": {
                "warning_hours": s.sla_warning_hours,
                "critical_hours": s.sla_critical_hours,
            },
        }

    def default_config(self) -> SLAConfig:
        return SLAConfig.model_validate(self._defaults())

    def load(self, path: Optional[Path] = None) -> SLAConfig:
        """
        Initial configuration load.

        Raises:
            ConfigurationException: if the file exists but is invalid
        """
        self._path = Path(path or self._settings.sla_config_path)
        config = self._load_from_file(self._path)
        with self._lock:
            self._config = config
        return config

    def _load_from_file(self, path: Path) -> SLAConfig:
        """Load and parse YAML config file."""
        if not path.exists():
            logger.warning("SLA config file not found, using defaults", extra={"path": str(path)})
            return self.default_config()

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationException(
                f"Cannot read SLA config file {path}: {e}",
                {"path": str(path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"SLA config file {path} must contain a mapping",
                {"path": str(path)}
            )

        try:
            return SLAConfig.model_validate({**self._defaults(), **data})
        except ValidationError as e:
            raise ConfigurationException(
                f"Invalid SLA config file {path}",
                {"path": str(path), "errors": e.errors(include_url=False, include_context=False)}
            ) from e

    def reload(self) -> bool:
        """Reload configuration from file, keeping the current one on error."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except ConfigurationException as e:
            logger.error(
                "Failed to reload SLA config, keeping previous configuration",
                extra={"error": e.message, **e.details}
            )
            return False

        with self._lock:
            self._config = new_config
        logger.info("SLA configuration reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching configuration file for changes.

        Skips watching if:
        - File doesn't exist
        - Running in an environment where file events are unavailable
        """
        if self._path is None:
            raise RuntimeError("Config not loaded. Call load() first.")

        if not self._path.exists():
            logger.info(
                "Config file doesn't exist, skipping file watch",
                extra={"path": str(self._path)}
            )
            return

        try:
            self._observer = Observer()
            handler = ConfigFileHandler(self, self._path)
            self._observer.schedule(
                handler,
                str(self._path.resolve().parent),
                recursive=False
            )
            self._observer.start()
            logger.info("Started watching config file", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning(f"File watching not available, using static config: {e}")
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching configuration file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    @property
    def config(self) -> SLAConfig:
        """Get current configuration."""
        with self._lock:
            if self._config is None:
                raise RuntimeError("SLA configuration not loaded")
            return self._config
