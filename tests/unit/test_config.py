import pytest
from pydantic import ValidationError
from watchdog.events import FileModifiedEvent, FileMovedEvent

from helpdesk_sla.config import Settings
from helpdesk_sla.core import ConfigurationException
from helpdesk_sla.sla.domain import BusinessHoursConfig, CustomSLAConfiguration, SLAConfig
from helpdesk_sla.sla.infrastructure import ConfigFileHandler, SLAConfigManager, YAMLConfigProvider

VALID_YAML = """
business_hours:
  start_hour: 9
  end_hour: 17
  holidays: [2025-03-04]
company_business_hours:
  2:
    start_hour: 7
    end_hour: 19
    work_days: [0, 1, 2, 3, 4, 5]
thresholds:
  warning_hours: 6
  critical_hours: 1
configurations:
  - id: 101
    company_id: 1
    department_id: 3
    incident_type_id: 7
    priority: Alta
    response_time_hours: 2
    resolution_time_hours: 6
company_defaults:
  - id: 12
    company_id: 1
    priority: high
    response_time_hours: 4
    resolution_time_hours: 24
"""

INVALID_TIMES_YAML = """
company_defaults:
  - company_id: 1
    priority: high
    response_time_hours: 24
    resolution_time_hours: 4
"""


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        business_start_hour=7,
        business_end_hour=16,
        sla_warning_hours=5,
        sla_critical_hours=1,
    )


@pytest.fixture
def manager(settings):
    return SLAConfigManager(settings)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "sla_config.yaml"
    path.write_text(VALID_YAML, encoding="utf-8")
    return path


class TestSLAConfigModels:

    def test_defaults(self):
        config = SLAConfig()
        assert set(config.fallback) == {"low", "medium", "high", "critical"}
        assert config.fallback["critical"].resolution_time_hours == 4
        assert config.get_thresholds().warning_hours == 8

    def test_response_must_be_shorter_than_resolution(self):
        with pytest.raises(ValidationError):
            CustomSLAConfiguration(
                company_id=1, department_id=3, incident_type_id=7,
                response_time_hours=8, resolution_time_hours=8,
            )

    def test_hours_must_be_positive(self):
        with pytest.raises(ValidationError):
            CustomSLAConfiguration(
                company_id=1, department_id=3, incident_type_id=7,
                response_time_hours=0, resolution_time_hours=8,
            )

    def test_unknown_fallback_priority_rejected(self):
        with pytest.raises(ValidationError):
            SLAConfig(fallback={"urgent": {"response_time_hours": 1, "resolution_time_hours": 2}})

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError):
            BusinessHoursConfig(timezone="Mars/Olympus_Mons")

    def test_invalid_window_rejected(self):
        with pytest.raises(ValidationError):
            BusinessHoursConfig(start_hour=18, end_hour=8)

    def test_company_calendar(self):
        config = SLAConfig(company_business_hours={2: BusinessHoursConfig(start_hour=7, end_hour=19)})
        assert config.calendar_for(2).daily_hours == 12
        assert config.calendar_for(1).daily_hours == 10
        assert config.calendar_for(None).daily_hours == 10


class TestSLAConfigManager:

    def test_missing_file_uses_settings(self, manager, tmp_path):
        config = manager.load(tmp_path / "missing.yaml")
        assert config.business_hours.start_hour == 7
        assert config.business_hours.end_hour == 16
        assert config.thresholds.warning_hours == 5
        assert config.configurations == []

    def test_load_valid_file(self, manager, config_file):
        config = manager.load(config_file)

        assert config.business_hours.start_hour == 9
        assert config.calendar_for(1).daily_hours == 8
        assert config.calendar_for(2).daily_hours == 12
        assert config.thresholds.critical_hours == 1
        assert config.configurations[0].priority == "Alta"
        assert config.company_defaults[0].resolution_time_hours == 24
        assert manager.config is config

    def test_sections_missing_from_file_come_from_settings(self, manager, tmp_path):
        path = tmp_path / "sla_config.yaml"
        path.write_text("configurations: []\n", encoding="utf-8")
        config = manager.load(path)
        assert config.business_hours.start_hour == 7
        assert config.thresholds.warning_hours == 5

    def test_empty_file_uses_defaults(self, manager, tmp_path):
        path = tmp_path / "sla_config.yaml"
        path.write_text("", encoding="utf-8")
        assert manager.load(path).business_hours.end_hour == 16

    @pytest.mark.parametrize("content", [
        INVALID_TIMES_YAML,
        "- just\n- a list\n",
        "business_hours: {start_hour: [unclosed\n",
        "fallback:\n  urgent: {response_time_hours: 1, resolution_time_hours: 2}\n",
    ])
    def test_invalid_file_fails_initial_load(self, manager, tmp_path, content):
        path = tmp_path / "sla_config.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationException):
            manager.load(path)

    def test_reload_picks_up_changes(self, manager, config_file):
        manager.load(config_file)
        config_file.write_text(VALID_YAML.replace("start_hour: 9", "start_hour: 10"), encoding="utf-8")

        assert manager.reload() is True
        assert manager.config.business_hours.start_hour == 10

    def test_reload_keeps_previous_config_on_error(self, manager, config_file):
        previous = manager.load(config_file)
        config_file.write_text(INVALID_TIMES_YAML, encoding="utf-8")

        assert manager.reload() is False
        assert manager.config is previous

    def test_reload_before_load(self, manager):
        assert manager.reload() is False

    def test_config_before_load(self, manager):
        with pytest.raises(RuntimeError):
            manager.config

    def test_watch_requires_load(self, manager):
        with pytest.raises(RuntimeError):
            manager.start_watching()

    def test_watch_skipped_for_missing_file(self, manager, tmp_path):
        manager.load(tmp_path / "missing.yaml")
        manager.start_watching()
        assert not manager.is_watching

    def test_start_and_stop_watching(self, manager, config_file):
        manager.load(config_file)
        manager.start_watching()
        try:
            assert manager.is_watching
        finally:
            manager.stop_watching()
        assert not manager.is_watching

    def test_provider_reads_current_config(self, manager, config_file):
        manager.load(config_file)
        provider = YAMLConfigProvider(manager)
        config_file.write_text(VALID_YAML.replace("warning_hours: 6", "warning_hours: 7"), encoding="utf-8")

        assert manager.reload()
        assert provider.get_config().thresholds.warning_hours == 7


class TestConfigFileHandler:

    def test_modification_triggers_reload(self, manager, config_file):
        manager.load(config_file)
        handler = ConfigFileHandler(manager, config_file)
        config_file.write_text(VALID_YAML.replace("end_hour: 17", "end_hour: 18"), encoding="utf-8")

        handler.on_modified(FileModifiedEvent(str(config_file)))

        assert manager.config.business_hours.end_hour == 18

    def test_other_files_ignored(self, manager, config_file, tmp_path):
        previous = manager.load(config_file)
        handler = ConfigFileHandler(manager, config_file)
        config_file.write_text(VALID_YAML.replace("end_hour: 17", "end_hour: 18"), encoding="utf-8")

        handler.on_modified(FileModifiedEvent(str(tmp_path / "other.yaml")))

        assert manager.config is previous

    def test_atomic_replace_triggers_reload(self, manager, config_file, tmp_path):
        manager.load(config_file)
        handler = ConfigFileHandler(manager, config_file)
        config_file.write_text(VALID_YAML.replace("start_hour: 9", "start_hour: 8"), encoding="utf-8")

        handler.on_moved(FileMovedEvent(str(tmp_path / ".sla_config.yaml.swp"), str(config_file)))

        assert manager.config.business_hours.start_hour == 8
