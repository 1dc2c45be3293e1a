"""Fleet-wide execution and aggregation loop."""

import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..errors import ClusterUnavailable, NodesUnavailable
from ..model.node import ClusterTarget, NodeIdentity
from ..model.result import MitigationReport, NodeResult, NodeStatus
from ..remote.topology import TopologyProvider
from ..utils.logger import get_logger
from .dispatcher import NodeDispatcher

logger = get_logger(__name__)

CLUSTER_UNAVAILABLE = "cluster unavailable"
NODES_UNAVAILABLE = "nodes unavailable"

# Extra time the channel gets to honour its own timeout before the watchdog steps in
TIMEOUT_GRACE_SECONDS = 5.0
WATCHDOG_INTERVAL = 1.0


class FleetOrchestrator:
    """Resolves clusters, dispatches nodes through a bounded pool, and keeps input order.

    Failures are isolated per cluster and per node; every submitted cluster
    contributes at least one row to the report.
    """

    def __init__(
        self,
        topology: TopologyProvider,
        dispatcher: NodeDispatcher,
        max_workers: int = 8,
        node_timeout: Optional[float] = None,
        on_result: Optional[Callable[[NodeResult], None]] = None,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.topology = topology
        self.dispatcher = dispatcher
        self.max_workers = max_workers
        self.node_timeout = node_timeout
        self.on_result = on_result

    def run(self, clusters: Sequence[Union[ClusterTarget, str]]) -> MitigationReport:
        """Process every cluster and return the report in input order."""
        targets = [c if isinstance(c, ClusterTarget) else ClusterTarget(name=c) for c in clusters]
        if not targets:
            raise ValueError("At least one cluster is required")

        logger.info(f"Starting mitigation run for {len(targets)} cluster(s)")
        slots: List[Optional[NodeResult]] = []
        nodes: Dict[int, NodeIdentity] = {}

        for cluster in targets:
            resolved = self._resolve_cluster(cluster)
            if isinstance(resolved, NodeResult):
                slots.append(resolved)
                self._emit(resolved)
                continue
            for node in resolved:
                nodes[len(slots)] = node
                slots.append(None)

        if nodes:
            self._dispatch_all(nodes, slots)

        report = MitigationReport()
        for slot in slots:
            if slot is not None:
                report.append(slot)
        summary = report.summary()
        logger.info(
            "Mitigation run complete: "
            + ", ".join(f"{status}={count}" for status, count in summary.items())
        )
        return report

    def _resolve_cluster(self, cluster: ClusterTarget) -> Union[NodeResult, List[NodeIdentity]]:
        logger.info(f"Resolving nodes for cluster {cluster.name}")
        try:
            members = self.topology.resolve_nodes(cluster)
        except NodesUnavailable as e:
            logger.error(f"Failed to get nodes for cluster {cluster.name}: {e}")
            return self._unavailable(cluster, NODES_UNAVAILABLE, f"Failed to get cluster nodes: {e}")
        except ClusterUnavailable as e:
            logger.error(f"Failed to connect to cluster {cluster.name}: {e}")
            return self._unavailable(cluster, CLUSTER_UNAVAILABLE, f"Failed to connect to cluster: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error resolving cluster {cluster.name}")
            return self._unavailable(cluster, CLUSTER_UNAVAILABLE, f"Failed to connect to cluster: {e}")

        if not members:
            logger.warning(f"Cluster {cluster.name} reported no nodes")
            return self._unavailable(cluster, NODES_UNAVAILABLE, "Cluster reported no nodes")

        logger.info(f"Cluster {cluster.name} has {len(members)} node(s)")
        return list(members)

    @staticmethod
    def _unavailable(cluster: ClusterTarget, reason: str, message: str) -> NodeResult:
        return NodeResult(
            cluster_name=cluster.name,
            node_name=f"{cluster.name} ({reason})",
            status=NodeStatus.FAIL,
            message=message,
        )

    def _dispatch_all(self, nodes: Dict[int, NodeIdentity], slots: List[Optional[NodeResult]]) -> None:
        """Fill node slots from a worker pool; this thread is the only writer."""
        cancels = {index: threading.Event() for index in nodes}
        started: Dict[int, float] = {}
        abandoned = False

        def work(index: int) -> NodeResult:
            started[index] = time.monotonic()
            return self.dispatcher.dispatch(
                nodes[index], timeout=self.node_timeout, cancel=cancels[index]
            )

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="node")
        try:
            outstanding: Dict[Future, int] = {
                executor.submit(work, index): index for index in nodes
            }
            while outstanding:
                done, _ = wait(outstanding, timeout=WATCHDOG_INTERVAL, return_when=FIRST_COMPLETED)
                for future in done:
                    index = outstanding.pop(future)
                    self._fill(slots, index, self._result_of(future, nodes[index]))

                if self.node_timeout:
                    abandoned |= self._expire(outstanding, started, cancels, nodes, slots)
        finally:
            executor.shutdown(wait=not abandoned, cancel_futures=True)

    def _expire(self, outstanding, started, cancels, nodes, slots) -> bool:
        """Cancel nodes that ran past their timeout; True if any were abandoned."""
        now = time.monotonic()
        limit = self.node_timeout + TIMEOUT_GRACE_SECONDS
        expired = False
        for future, index in list(outstanding.items()):
            began = started.get(index)
            if began is None or now - began <= limit:
                continue
            cancels[index].set()
            del outstanding[future]
            expired = True
            node = nodes[index]
            logger.error(f"[{node.cluster}] {node.name} timed out after {self.node_timeout:g}s")
            self._fill(
                slots,
                index,
                NodeDispatcher.failure(
                    node, f"Failed to connect to node: timed out after {self.node_timeout:g}s"
                ),
            )
        return expired

    @staticmethod
    def _result_of(future: Future, node: NodeIdentity) -> NodeResult:
        try:
            return future.result()
        except Exception as e:
            logger.exception(f"[{node.cluster}] Dispatch of {node.name} failed")
            return NodeDispatcher.failure(node, f"Remote invocation failed: {e}")

    def _fill(self, slots: List[Optional[NodeResult]], index: int, result: NodeResult) -> None:
        slots[index] = result
        self._emit(result)

    def _emit(self, result: NodeResult) -> None:
        if self.on_result is None:
            return
        try:
            self.on_result(result)
        except Exception:
            logger.exception("Result callback failed")
