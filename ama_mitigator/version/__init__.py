"""AMA extension version handling."""

from .comparator import (
    MITIGATION_THRESHOLD,
    ComponentVersion,
    Ordering,
    compare,
    parse_version,
    requires_mitigation,
    version_sort_key,
)

__all__ = [
    "MITIGATION_THRESHOLD",
    "ComponentVersion",
    "Ordering",
    "compare",
    "parse_version",
    "requires_mitigation",
    "version_sort_key",
]
