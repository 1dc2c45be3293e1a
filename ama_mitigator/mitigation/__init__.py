"""Per-node mitigation decision logic."""

from .engine import MitigationEngine
from .locator import (
    DirectoryScanResolver,
    InstallationLocator,
    InstallRootResolver,
    ProcessAnchorResolver,
)

__all__ = [
    "MitigationEngine",
    "DirectoryScanResolver",
    "InstallationLocator",
    "InstallRootResolver",
    "ProcessAnchorResolver",
]
