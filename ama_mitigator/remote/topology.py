"""Cluster membership providers."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ..errors import ClusterUnavailable, NodesUnavailable
from ..model.node import ClusterTarget, NodeIdentity
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TopologyProvider(ABC):
    """Resolves the member nodes of a cluster."""

    @abstractmethod
    def resolve_nodes(self, cluster: ClusterTarget) -> List[NodeIdentity]:
        """Return nodes in cluster order; raise ClusterUnavailable or NodesUnavailable."""


class StaticTopology(TopologyProvider):
    """Topology from an in-memory mapping of cluster name to node names.

    A value of None marks a cluster whose node list cannot be read.
    """

    def __init__(self, clusters: Dict[str, Optional[List[str]]]):
        self.clusters = clusters

    def resolve_nodes(self, cluster: ClusterTarget) -> List[NodeIdentity]:
        if cluster.name not in self.clusters:
            raise ClusterUnavailable(f"Cluster {cluster.name} not found in inventory")

        members = self.clusters[cluster.name]
        if members is None or not isinstance(members, list):
            raise NodesUnavailable(f"No node list recorded for cluster {cluster.name}")

        return [NodeIdentity(name=str(name), cluster=cluster.name) for name in members]


class InventoryTopology(StaticTopology):
    """Topology loaded from a YAML inventory file.

    Accepts either ``clusters: {name: [node, ...]}`` or the mapping at top level.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        with open(self.path, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in inventory {self.path}: {e}") from e

        if isinstance(data, dict) and isinstance(data.get("clusters"), dict):
            data = data["clusters"]
        if not isinstance(data, dict):
            raise ValueError(f"Inventory {self.path} must map cluster names to node lists")

        logger.info(f"Loaded {len(data)} cluster(s) from {self.path}")
        super().__init__({str(name): members for name, members in data.items()})


class DirectTopology(TopologyProvider):
    """Treats each cluster name as a standalone host."""

    def resolve_nodes(self, cluster: ClusterTarget) -> List[NodeIdentity]:
        return [NodeIdentity(name=cluster.name, cluster=cluster.name)]
