"""
Planner Configuration

Planning defaults and logging settings from config.yaml and the environment.
"""

import os
from typing import Optional

import yaml

from .logging import configure_logging
from .models import PlanningOptions, SprintOptions


# Environment variable -> (section, key) in config.yaml
ENV_OVERRIDES = {
    "SPRINT_DURATION_DAYS": ("planning", "sprint_duration_days"),
    "SPRINT_BUFFER_PERCENTAGE": ("planning", "buffer_percentage"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FORMAT": ("logging", "format"),
}


class Config:
    """
    Planner settings from an optional YAML file, overridden by the environment.

    Usage:
        config = Config("config/config.yaml")
        config.setup_logging()
        orchestrator = SprintOrchestrator(developers, tasks, sprints, config=config)
    """

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config = self._read_file(config_path)
        self._apply_env_overrides()

    @staticmethod
    def _read_file(config_path: str) -> dict:
        if not os.path.exists(config_path):
            return {}
        with open(config_path) as f:
            return yaml.safe_load(f) or {}

    def _apply_env_overrides(self) -> None:
        """Non-empty environment values win over the file."""
        for env_var, (section, key) in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if not value:
                continue
            if not self.config.get(section):
                self.config[section] = {}
            self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        return (self.config.get(section) or {}).get(key, default)

    @property
    def sprint_duration_days(self) -> Optional[float]:
        return self.get("planning", "sprint_duration_days")

    @property
    def buffer_percentage(self) -> Optional[float]:
        return self.get("planning", "buffer_percentage")

    @property
    def log_level(self) -> str:
        return self.get("logging", "level", "info")

    @property
    def log_format(self) -> str:
        return self.get("logging", "format", "console")

    def _planning_values(self) -> dict:
        values = {}
        if self.sprint_duration_days is not None:
            values["sprint_duration_days"] = self.sprint_duration_days
        if self.buffer_percentage is not None:
            values["buffer_percentage"] = self.buffer_percentage
        return values

    def planning_options(self) -> PlanningOptions:
        """Capacity options with configured overrides; pydantic validates the ranges."""
        return PlanningOptions(**self._planning_values())

    def sprint_options(self) -> SprintOptions:
        """
        Sprint run defaults. A configured duration is only applied when set
        explicitly, otherwise it is derived from the sprint dates.
        """
        return SprintOptions(**self._planning_values())

    def setup_logging(self) -> None:
        configure_logging(self.log_level, json_output=self.log_format == "json")
