"""Test configuration and fixtures."""

import posixpath
from typing import Dict, Iterable, List, Optional

import pytest

from ama_mitigator.config import MitigationSettings
from ama_mitigator.errors import HostError
from ama_mitigator.host.base import NodeHost
from ama_mitigator.model.node import ProcessObservation
from ama_mitigator.model.result import MitigationReport, NodeResult, NodeStatus

PLUGIN_ROOT = "/packages/plugins/ama"
EXE_RELATIVE = "Monitoring/Agent/Extensions/MetricsExtension/MetricsExtension.Native.exe"
HEALTH_MONITOR = "AMAExtHealthMonitor.exe"
METRICS_EXTENSION = "MetricsExtension.Native.exe"


class FakeHost(NodeHost):
    """In-memory node used in place of psutil and the real filesystem."""

    path = posixpath

    def __init__(
        self,
        processes: Optional[Iterable[ProcessObservation]] = None,
        files: Optional[Iterable[str]] = None,
        directories: Optional[Dict[str, List[str]]] = None,
        stop_errors: Optional[Dict[int, str]] = None,
        rename_error: Optional[Exception] = None,
        rename_noop: bool = False,
    ):
        self.processes = list(processes or [])
        self.files = set(files or [])
        self.directories = dict(directories or {})
        self.stop_errors = dict(stop_errors or {})
        self.rename_error = rename_error
        self.rename_noop = rename_noop
        self.stopped: List[int] = []
        self.renames: List[tuple] = []
        self.settled: List[float] = []

    def list_processes(self) -> List[ProcessObservation]:
        return list(self.processes)

    def stop_process(self, pid: int) -> None:
        if pid in self.stop_errors:
            raise HostError(self.stop_errors[pid])
        self.stopped.append(pid)
        self.processes = [p for p in self.processes if p.pid != pid]

    def exists(self, path: str) -> bool:
        return path in self.files

    def rename(self, src: str, dst: str) -> None:
        self.renames.append((src, dst))
        if self.rename_error:
            raise self.rename_error
        if src not in self.files:
            raise FileNotFoundError(src)
        if self.rename_noop:
            return
        self.files.discard(src)
        self.files.add(dst)

    def list_subdirectories(self, path: str) -> Optional[List[str]]:
        if path not in self.directories:
            return None
        value = self.directories[path]
        if isinstance(value, Exception):
            raise value
        return list(value)

    def settle(self, seconds: float) -> None:
        self.settled.append(seconds)


def install_root(version: str) -> str:
    return f"{PLUGIN_ROOT}/{version}"


def exe_path(version: str) -> str:
    return f"{install_root(version)}/{EXE_RELATIVE}"


def monitor_process(version: str, pid: int = 100) -> ProcessObservation:
    return ProcessObservation(
        name=HEALTH_MONITOR,
        pid=pid,
        exe=f"{install_root(version)}/bin/{HEALTH_MONITOR}",
        ppid=1,
        parent_name="services.exe",
        parent_exe="/windows/system32/services.exe",
    )


def metrics_process(version: str, pid: int = 200, parent_pid: int = 100) -> ProcessObservation:
    return ProcessObservation(
        name=METRICS_EXTENSION,
        pid=pid,
        exe=exe_path(version),
        ppid=parent_pid,
        cmdline=[exe_path(version)],
        parent_name=HEALTH_MONITOR,
        parent_exe=f"{install_root(version)}/bin/{HEALTH_MONITOR}",
    )


@pytest.fixture
def settings():
    """Engine settings pointing at the fake plugin root, with no settle delay."""
    return MitigationSettings(plugin_root=PLUGIN_ROOT, settle_seconds=0)


@pytest.fixture
def make_node():
    """Build a FakeHost with one AMA install in a given state."""

    def _make(
        version: str = "1.39.0.0",
        running: bool = True,
        source: bool = True,
        renamed: bool = False,
        installed: bool = True,
        **kwargs,
    ) -> FakeHost:
        processes = [monitor_process(version), metrics_process(version)] if running else []
        files = set()
        if source:
            files.add(exe_path(version))
        if renamed:
            files.add(exe_path(version) + ".org")
        directories = {PLUGIN_ROOT: [version]} if installed else {}
        return FakeHost(processes=processes, files=files, directories=directories, **kwargs)

    return _make


@pytest.fixture
def sample_report():
    """A report mixing every status and a synthetic cluster row."""
    return MitigationReport(
        results=[
            NodeResult(
                cluster_name="C1",
                node_name="node-a",
                status=NodeStatus.SUCCESS,
                message="Mitigation applied: renamed a to a.org",
                component_version="1.39.0.0",
            ),
            NodeResult(
                cluster_name="C1",
                node_name="node-b",
                status=NodeStatus.SKIPPED,
                message="AMA Extension not installed",
            ),
            NodeResult(
                cluster_name="C2",
                node_name="C2 (cluster unavailable)",
                status=NodeStatus.FAIL,
                message='Failed to connect to cluster: "access denied", retry later',
            ),
        ]
    )
