"""Settings for the node engine and the fleet run."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import MitigatorError
from .version import parse_version
from .utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PLUGIN_ROOT = r"C:\Packages\Plugins\Microsoft.Azure.Monitor.AzureMonitorWindowsAgent"
DEFAULT_EXE_RELATIVE_PATH = r"Monitoring\Agent\Extensions\MetricsExtension\MetricsExtension.Native.exe"


class ConfigError(MitigatorError):
    """The settings file could not be loaded."""


class MitigationSettings(BaseModel):
    """Constants the decision engine runs with on every node."""

    monitored_process: str = "MetricsExtension.Native.exe"
    health_monitor_process: str = "AMAExtHealthMonitor.exe"
    plugin_root: str = DEFAULT_PLUGIN_ROOT
    exe_relative_path: str = DEFAULT_EXE_RELATIVE_PATH
    renamed_suffix: str = ".org"
    settle_seconds: float = Field(default=5.0, ge=0)
    threshold: str = "1.41.0.0"

    @field_validator("threshold")
    @classmethod
    def _check_threshold(cls, value: str) -> str:
        parse_version(value)
        return value.strip()


class FleetSettings(BaseModel):
    """Settings for driving the fleet from the control host."""

    max_workers: int = Field(default=8, ge=1)
    node_timeout: float = Field(default=300.0, gt=0)
    ssh_username: Optional[str] = None
    ssh_password: Optional[str] = None
    ssh_key_filename: Optional[str] = None
    ssh_port: int = 22
    connect_timeout: float = Field(default=30.0, gt=0)
    remote_python: str = "python"


class Settings(BaseModel):
    """Top-level settings file layout."""

    engine: MitigationSettings = Field(default_factory=MitigationSettings)
    fleet: FleetSettings = Field(default_factory=FleetSettings)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a YAML file; defaults when no path is given."""
    if path is None:
        return Settings()

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Settings file not found: {path}")

    try:
        with open(path, "r") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e

    logger.debug(f"Loaded settings from {path}")
    return settings
