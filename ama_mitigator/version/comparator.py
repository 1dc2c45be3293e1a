"""Four-part AMA extension version parsing and ordering."""

import re
from enum import Enum
from typing import NamedTuple, Tuple, Union

from ..errors import VersionParseError

VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)\.(\d+)$")


class ComponentVersion(NamedTuple):
    """major.minor.build.revision, ordered numerically field by field."""

    major: int
    minor: int
    build: int
    revision: int

    def __str__(self) -> str:
        return ".".join(str(part) for part in self)


class Ordering(str, Enum):
    """Result of comparing two versions."""

    LT = "lt"
    EQ = "eq"
    GT = "gt"


# Versions below this carry the MetricsExtension defect
MITIGATION_THRESHOLD = ComponentVersion(1, 41, 0, 0)

VersionLike = Union[ComponentVersion, str]


def parse_version(folder_name: str) -> ComponentVersion:
    """Parse an install folder name such as ``1.39.0.0``."""
    match = VERSION_PATTERN.match(folder_name.strip()) if folder_name else None
    if not match:
        raise VersionParseError(f"Not a four-part version: {folder_name!r}")
    return ComponentVersion(*(int(group) for group in match.groups()))


def _coerce(version: VersionLike) -> ComponentVersion:
    if isinstance(version, ComponentVersion):
        return version
    return parse_version(version)


def compare(a: VersionLike, b: VersionLike) -> Ordering:
    """Compare two versions."""
    left, right = _coerce(a), _coerce(b)
    if left < right:
        return Ordering.LT
    if left > right:
        return Ordering.GT
    return Ordering.EQ


def requires_mitigation(
    version: VersionLike, threshold: VersionLike = MITIGATION_THRESHOLD
) -> bool:
    """Check if a version is below the fixed release."""
    return compare(version, threshold) == Ordering.LT


def version_sort_key(folder_name: str) -> Tuple[int, Tuple[int, ...], str]:
    """Sort key that ranks parseable versions above any other folder name."""
    try:
        return 1, tuple(parse_version(folder_name)), folder_name
    except VersionParseError:
        return 0, (), folder_name
