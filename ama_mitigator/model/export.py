"""Export-related models."""

from enum import Enum


class ReportFormat(str, Enum):
    """Supported report formats."""

    CSV = "csv"
    JSON = "json"
    YAML = "yaml"


class ChannelKind(str, Enum):
    """How node procedures are executed."""

    SSH = "ssh"
    LOCAL = "local"
