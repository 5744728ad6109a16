"""
Tests for configuration loading and logging setup.
"""

import pydantic
import pytest

from sprint_planner.config import Config
from sprint_planner.logging import configure_logging, get_logger


ENV_VARS = ["SPRINT_DURATION_DAYS", "SPRINT_BUFFER_PERCENTAGE", "LOG_LEVEL", "LOG_FORMAT"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Tests for Config."""

    def test_defaults_without_file(self, tmp_path):
        """Test a missing file falls back to built-in defaults."""
        config = Config(str(tmp_path / "missing.yaml"))

        options = config.planning_options()

        assert options.sprint_duration_days == 14
        assert options.buffer_percentage == 20
        assert config.sprint_options().sprint_duration_days is None
        assert config.log_level == "info"
        assert config.log_format == "console"

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "planning:\n"
            "  sprint_duration_days: 5\n"
            "  buffer_percentage: 10\n"
            "logging:\n"
            "  level: debug\n"
        )

        config = Config(str(path))

        assert config.planning_options().buffer_percentage == 10
        assert config.sprint_options().sprint_duration_days == 5
        assert config.log_level == "debug"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert Config(str(path)).config == {}

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        """Test environment variables win over the file."""
        path = tmp_path / "config.yaml"
        path.write_text("planning:\n  buffer_percentage: 10\n")
        monkeypatch.setenv("SPRINT_BUFFER_PERCENTAGE", "30")
        monkeypatch.setenv("LOG_FORMAT", "json")

        config = Config(str(path))

        assert config.planning_options().buffer_percentage == 30
        assert config.log_format == "json"

    def test_invalid_buffer_rejected(self, tmp_path, monkeypatch):
        """Test out-of-range values fail validation."""
        monkeypatch.setenv("SPRINT_BUFFER_PERCENTAGE", "150")

        config = Config(str(tmp_path / "missing.yaml"))

        with pytest.raises(pydantic.ValidationError):
            config.planning_options()

    def test_get_with_default(self, tmp_path):
        config = Config(str(tmp_path / "missing.yaml"))

        assert config.get("planning", "unknown", "fallback") == "fallback"

    def test_env_fills_empty_section(self, tmp_path, monkeypatch):
        """Test an override lands in a section the file leaves empty."""
        path = tmp_path / "config.yaml"
        path.write_text("planning:\nlogging:\n  level: debug\n")
        monkeypatch.setenv("SPRINT_DURATION_DAYS", "7")

        config = Config(str(path))

        assert config.sprint_options().sprint_duration_days == 7
        assert config.log_level == "debug"


class TestLogging:
    """Tests for structured logging setup."""

    def test_json_logging(self):
        """Test JSON output can be configured and used."""
        configure_logging("debug", json_output=True)

        get_logger("tests").info("capacity_checked", developers=2)

    def test_setup_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        Config(str(tmp_path / "missing.yaml")).setup_logging()

        assert get_logger("tests") is not None
