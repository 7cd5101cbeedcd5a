"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidZoneError
from .domain.zones import DstPolicy, get_zone

TIMEZONE_ENV_VAR = "DEFAULT_TIMEZONE"


class SlotDefaults(BaseModel):
    """Default granularities for slot generation."""
    fine_minutes: int = 15
    coarse_minutes: int = 30

    @field_validator("fine_minutes", "coarse_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure granularities are positive."""
        if value <= 0:
            raise ValueError(f"Granularity must be greater than zero, got {value}")
        return value

    @model_validator(mode="after")
    def validate_multiple(self) -> "SlotDefaults":
        """Coarse slots must be made of whole fine slots."""
        if self.coarse_minutes % self.fine_minutes != 0:
            raise ValueError("coarse_minutes must be a multiple of fine_minutes")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    shop_id: str
    default_timezone: str = "Europe/Amsterdam"
    data_file: Path = Path("schedule.json")
    dst_policy: DstPolicy = DstPolicy.COMPATIBLE
    log_level: str = "WARNING"
    slots: SlotDefaults = Field(default_factory=SlotDefaults)

    @field_validator("default_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the fallback zone is a known IANA zone."""
        try:
            get_zone(value)
        except InvalidZoneError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        env_zone = os.environ.get(TIMEZONE_ENV_VAR)
        if env_zone:
            data["default_timezone"] = env_zone

        config = cls(**data)

        # Relative data paths are relative to the config file
        if not config.data_file.is_absolute():
            config = config.model_copy(
                update={"data_file": config_path.parent / config.data_file}
            )

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
