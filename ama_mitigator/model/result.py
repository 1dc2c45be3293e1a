"""Mitigation result and report models."""

from enum import Enum
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel, Field

NOT_AVAILABLE = "N/A"

# Column order is consumed by downstream tooling; do not reorder.
REPORT_COLUMNS = ("ClusterName", "NodeName", "Status", "Message", "ComponentVersion")


class NodeStatus(str, Enum):
    """Terminal status of one node."""

    SUCCESS = "Success"
    SKIPPED = "Skipped"
    FAIL = "Fail"


class NodeOutcome(BaseModel):
    """What the decision engine reports back from a node."""

    status: NodeStatus
    message: str
    component_version: str = NOT_AVAILABLE


class NodeResult(BaseModel):
    """One report row."""

    cluster_name: str
    node_name: str
    status: NodeStatus
    message: str
    component_version: str = NOT_AVAILABLE

    class Config:
        frozen = True

    @classmethod
    def from_outcome(cls, cluster_name: str, node_name: str, outcome: NodeOutcome) -> "NodeResult":
        """Tag an engine outcome with the node it came from."""
        return cls(
            cluster_name=cluster_name,
            node_name=node_name,
            status=outcome.status,
            message=outcome.message,
            component_version=outcome.component_version,
        )

    def as_row(self) -> Dict[str, str]:
        """Return the row keyed by report column name."""
        return dict(
            zip(
                REPORT_COLUMNS,
                (
                    self.cluster_name,
                    self.node_name,
                    self.status.value,
                    self.message,
                    self.component_version,
                ),
            )
        )

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> "NodeResult":
        """Build a result from a row keyed by report column name."""
        return cls(
            cluster_name=row["ClusterName"],
            node_name=row["NodeName"],
            status=NodeStatus(row["Status"]),
            message=row["Message"],
            component_version=row["ComponentVersion"] or NOT_AVAILABLE,
        )


class MitigationReport(BaseModel):
    """Ordered results of a fleet run."""

    results: List[NodeResult] = Field(default_factory=list)

    def append(self, result: NodeResult) -> None:
        self.results.append(result)

    def extend(self, results: Iterable[NodeResult]) -> None:
        self.results.extend(results)

    def summary(self) -> Dict[str, int]:
        """Count results per status; every status is always present."""
        counts = {status.value: 0 for status in NodeStatus}
        for result in self.results:
            counts[result.status.value] += 1
        return counts

    def clusters(self) -> List[str]:
        """Cluster names in first-seen order."""
        return list(dict.fromkeys(r.cluster_name for r in self.results))

    def has_failures(self) -> bool:
        return any(r.status == NodeStatus.FAIL for r in self.results)

    def finalize(self) -> Tuple[NodeResult, ...]:
        """Immutable snapshot handed to report sinks."""
        return tuple(self.results)
