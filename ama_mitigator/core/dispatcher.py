"""Runs the decision engine on one node through a remote channel."""

import threading
from typing import Optional

from ..config import MitigationSettings
from ..errors import ConnectivityError
from ..model.node import NodeIdentity
from ..model.result import NodeResult, NodeStatus
from ..remote.channel import RemoteChannel
from ..utils.logger import get_logger

logger = get_logger(__name__)


class NodeDispatcher:
    """Normalizes every outcome of a node invocation into a NodeResult."""

    def __init__(self, channel: RemoteChannel, settings: Optional[MitigationSettings] = None):
        self.channel = channel
        self.settings = settings or MitigationSettings()

    def dispatch(
        self,
        node: NodeIdentity,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> NodeResult:
        """Never raises; transport and procedure failures become Fail results."""
        logger.info(f"[{node.cluster}] Processing node {node.name}")
        try:
            outcome = self.channel.execute(node, self.settings, timeout=timeout, cancel=cancel)
        except ConnectivityError as e:
            logger.error(f"[{node.cluster}] Failed to connect to node {node.name}: {e}")
            return self.failure(node, f"Failed to connect to node: {e}")
        except Exception as e:
            logger.exception(f"[{node.cluster}] Remote invocation failed on {node.name}")
            return self.failure(node, f"Remote invocation failed: {e}")

        result = NodeResult.from_outcome(node.cluster, node.name, outcome)
        logger.info(f"[{node.cluster}] {node.name}: {result.status.value} - {result.message}")
        return result

    @staticmethod
    def failure(node: NodeIdentity, message: str) -> NodeResult:
        return NodeResult(
            cluster_name=node.cluster,
            node_name=node.name,
            status=NodeStatus.FAIL,
            message=message,
        )
