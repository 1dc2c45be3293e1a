"""Cluster membership from kubectl contexts."""

import json
import subprocess
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ClusterUnavailable, NodesUnavailable
from ..model.node import ClusterTarget, NodeIdentity
from ..utils.logger import get_logger
from .topology import TopologyProvider

logger = get_logger(__name__)


class KubectlClient:
    """Wrapper for kubectl commands against one context."""

    def __init__(self, context: Optional[str] = None, request_timeout: int = 30):
        self.context = context
        self.request_timeout = request_timeout
        self._verify_kubectl()

    def _verify_kubectl(self):
        """Verify kubectl is available."""
        try:
            subprocess.run(
                ["kubectl", "version", "--client", "-o", "json"],
                capture_output=True,
                text=True,
                check=True,
            )
            logger.debug("kubectl verified successfully")
        except FileNotFoundError:
            raise RuntimeError("kubectl command not found. Please install kubectl.")
        except subprocess.CalledProcessError:
            logger.warning("kubectl verification failed")

    def _build_command(self, args: List[str]) -> List[str]:
        """Build kubectl command with context and request timeout."""
        cmd = ["kubectl"]

        if self.context:
            cmd.extend(["--context", self.context])

        cmd.append(f"--request-timeout={self.request_timeout}s")
        cmd.extend(args)
        return cmd

    def execute(self, args: List[str]) -> Tuple[bool, str]:
        """Execute kubectl command and return success status and output."""
        cmd = self._build_command(args)
        logger.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            logger.error(f"Command failed: {e.stderr}")
            return False, e.stderr

    def get_nodes(self) -> Optional[Dict[str, Any]]:
        """Get the node list as JSON; None if the output is not JSON."""
        success, output = self.execute(["get", "nodes", "-o", "json"])
        if not success:
            raise ClusterUnavailable((output or "kubectl get nodes failed").strip())
        try:
            return json.loads(output)
        except json.JSONDecodeError:
            logger.error("Failed to parse JSON output")
            return None


class KubectlTopology(TopologyProvider):
    """Treats every cluster name as a kube context."""

    def __init__(self, request_timeout: int = 30):
        self.request_timeout = request_timeout

    def resolve_nodes(self, cluster: ClusterTarget) -> List[NodeIdentity]:
        try:
            client = KubectlClient(context=cluster.name, request_timeout=self.request_timeout)
        except RuntimeError as e:
            raise ClusterUnavailable(str(e)) from e

        data = client.get_nodes()
        if not data or "items" not in data:
            raise NodesUnavailable(f"Unexpected node list for context {cluster.name}")

        nodes = []
        for item in data["items"]:
            name = item.get("metadata", {}).get("name")
            if name:
                nodes.append(NodeIdentity(name=name, cluster=cluster.name))
        return nodes
