"""Per-node mitigation decision engine.

Runs on the node itself. Each step either returns a terminal NodeOutcome or
hands a value to the next step:

    detect process -> resolve install root -> parse version -> version gate
    -> compute target paths -> idempotency check -> rename -> verify
"""

import re
import threading
from typing import List, Optional, Tuple, Union

from ..config import MitigationSettings
from ..errors import (
    ComponentNotInstalled,
    HostError,
    InstallFolderNotFound,
    RunCancelled,
    VersionParseError,
)
from ..host.base import NodeHost
from ..model.node import ProcessObservation
from ..model.result import NOT_AVAILABLE, NodeOutcome, NodeStatus
from ..utils.logger import get_logger
from ..version import ComponentVersion, parse_version, requires_mitigation
from .locator import InstallationLocator

logger = get_logger(__name__)

NOT_INSTALLED_MESSAGE = "AMA Extension not installed"
ALREADY_APPLIED_MESSAGE = "Mitigation already applied"


def _fail(message: str, version: str = NOT_AVAILABLE) -> NodeOutcome:
    return NodeOutcome(status=NodeStatus.FAIL, message=message, component_version=version)


def _success(message: str, version: str = NOT_AVAILABLE) -> NodeOutcome:
    return NodeOutcome(status=NodeStatus.SUCCESS, message=message, component_version=version)


class MitigationEngine:
    """Stops the defective MetricsExtension and renames its executable."""

    def __init__(
        self,
        host: NodeHost,
        settings: Optional[MitigationSettings] = None,
        locator: Optional[InstallationLocator] = None,
        cancel: Optional[threading.Event] = None,
    ):
        self.host = host
        self.settings = settings or MitigationSettings()
        self.locator = locator or InstallationLocator.default(self.settings)
        self.cancel = cancel

    def run(self) -> NodeOutcome:
        """Run every step in order and return the first terminal outcome.

        Raises RunCancelled when the cancel event is set before a step starts.
        """
        self._checkpoint("process detection")
        owned = self._detect_process()
        if isinstance(owned, NodeOutcome):
            return owned

        self._checkpoint("install folder resolution")
        root = self._resolve_install_root(owned)
        if isinstance(root, NodeOutcome):
            return root

        version = self._parse_version(root)
        if isinstance(version, NodeOutcome):
            return version
        version_text = str(version)

        if not requires_mitigation(version, self.settings.threshold):
            logger.info(f"Version {version_text} is not affected")
            return _success(f"No mitigation needed (version {version_text})", version_text)

        paths = self._compute_target_paths(root, version_text)
        if isinstance(paths, NodeOutcome):
            return paths
        source, renamed = paths

        applied = self._check_idempotency(source, renamed, version_text)
        if applied is not None:
            return applied

        self._checkpoint("rename")
        return self._rename(source, renamed, version_text)

    def _checkpoint(self, step: str) -> None:
        if self.cancel is not None and self.cancel.is_set():
            logger.warning(f"Cancelled before {step}")
            raise RunCancelled(f"cancelled before {step}")

    def _detect_process(self) -> Union[NodeOutcome, List[ProcessObservation]]:
        """Find and stop monitored processes owned by the health monitor."""
        owned = self.find_owned_processes(self.host.list_processes())

        for proc in owned:
            self._checkpoint(f"stopping PID {proc.pid}")
            logger.info(f"Stopping {proc.name} (PID {proc.pid}) started by {proc.parent_name}")
            try:
                self.host.stop_process(proc.pid)
            except HostError as e:
                return _fail(f"Failed to stop process {proc.name} (PID {proc.pid}): {e}")
            self.host.settle(self.settings.settle_seconds)

        return owned

    def find_owned_processes(
        self, processes: List[ProcessObservation]
    ) -> List[ProcessObservation]:
        """Monitored processes whose parent is the health monitor."""
        monitored = self.settings.monitored_process.lower()
        health_monitor = self.settings.health_monitor_process.lower()

        owned = []
        for proc in processes:
            if proc.name.lower() != monitored:
                continue
            if not proc.has_parent or proc.parent_name.lower() != health_monitor:
                logger.info(
                    f"Leaving {proc.name} (PID {proc.pid}) running: "
                    f"parent is {proc.parent_name or 'not found'}"
                )
                continue
            owned.append(proc)

        return sorted(owned, key=lambda proc: proc.pid)

    def _resolve_install_root(self, owned: List[ProcessObservation]) -> Union[NodeOutcome, str]:
        try:
            return self.locator.locate(self.host, owned)
        except ComponentNotInstalled as e:
            logger.info(str(e))
            return NodeOutcome(status=NodeStatus.SKIPPED, message=NOT_INSTALLED_MESSAGE)
        except InstallFolderNotFound:
            return _fail("Unable to determine installation folder")

    def _parse_version(self, root: str) -> Union[NodeOutcome, ComponentVersion]:
        folder_name = self.host.path.basename(root.rstrip("\\/"))
        try:
            return parse_version(folder_name)
        except VersionParseError:
            return _fail(f"Unable to determine version from folder name '{folder_name}'")

    def _compute_target_paths(self, root: str, version: str) -> Union[NodeOutcome, Tuple[str, str]]:
        """Build the executable path and its renamed sibling under the root."""
        try:
            parts = [part for part in re.split(r"[\\/]+", self.settings.exe_relative_path) if part]
            if not root or not parts:
                raise ValueError(
                    f"cannot join {self.settings.exe_relative_path!r} onto {root!r}"
                )
            source = self.host.path.join(root, *parts)
        except (TypeError, ValueError) as e:
            return _fail(f"Failed to build target paths: {e}", version)

        return source, source + self.settings.renamed_suffix

    def _check_idempotency(self, source: str, renamed: str, version: str) -> Optional[NodeOutcome]:
        """Return a terminal outcome when there is nothing left to rename."""
        if self.host.exists(source):
            return None
        if self.host.exists(renamed):
            logger.info(f"{renamed} already present")
            return _success(ALREADY_APPLIED_MESSAGE, version)
        return _fail(f"Neither {source} nor {renamed} found - cannot mitigate", version)

    def _rename(self, source: str, renamed: str, version: str) -> NodeOutcome:
        try:
            self.host.rename(source, renamed)
        except (OSError, HostError) as e:
            return _fail(f"Failed to rename {source}: {e}", version)

        if not self.host.exists(renamed):
            return _fail(f"Rename did not verify: {renamed} not found", version)

        logger.info(f"Renamed {source} to {renamed}")
        return _success(f"Mitigation applied: renamed {source} to {renamed}", version)

