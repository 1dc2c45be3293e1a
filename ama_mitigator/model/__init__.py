"""Data models for ama-mitigator."""

from .export import ChannelKind, ReportFormat
from .node import ClusterTarget, NodeIdentity, ProcessObservation
from .result import (
    NOT_AVAILABLE,
    REPORT_COLUMNS,
    MitigationReport,
    NodeOutcome,
    NodeResult,
    NodeStatus,
)

__all__ = [
    "ChannelKind",
    "ReportFormat",
    "ClusterTarget",
    "NodeIdentity",
    "ProcessObservation",
    "NOT_AVAILABLE",
    "REPORT_COLUMNS",
    "MitigationReport",
    "NodeOutcome",
    "NodeResult",
    "NodeStatus",
]
