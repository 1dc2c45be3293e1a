"""Installation folder resolution strategies."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..config import MitigationSettings
from ..errors import ComponentNotInstalled, InstallFolderNotFound
from ..host.base import NodeHost
from ..model.node import ProcessObservation
from ..utils.logger import get_logger
from ..version import version_sort_key

logger = get_logger(__name__)


class InstallRootResolver(ABC):
    """One strategy for finding the versioned install root on a node."""

    name = "resolver"

    def __init__(self, settings: MitigationSettings):
        self.settings = settings

    @abstractmethod
    def resolve(self, host: NodeHost, owned: List[ProcessObservation]) -> Optional[str]:
        """Return the install root, or None to defer to the next strategy."""


class ProcessAnchorResolver(InstallRootResolver):
    """Derive the root from the health monitor executable of a stopped process.

    The health monitor lives two levels below the versioned root, so the root
    is the parent of the directory holding it.
    """

    name = "process"

    def resolve(self, host: NodeHost, owned: List[ProcessObservation]) -> Optional[str]:
        anchored = [proc for proc in owned if proc.parent_exe]
        if not anchored:
            return None

        anchor = min(anchored, key=lambda proc: proc.pid).parent_exe
        anchor_dir = host.path.dirname(anchor)
        root = host.path.dirname(anchor_dir)
        if not root or root == anchor_dir:
            logger.debug(f"Anchor {anchor} has no grandparent directory")
            return None
        return root


class DirectoryScanResolver(InstallRootResolver):
    """Pick the highest versioned folder under the plugin root."""

    name = "directory-scan"

    def resolve(self, host: NodeHost, owned: List[ProcessObservation]) -> Optional[str]:
        plugin_root = self.settings.plugin_root
        try:
            folders = host.list_subdirectories(plugin_root)
        except OSError as e:
            logger.warning(f"Failed to list {plugin_root}: {e}")
            return None

        if not folders:
            raise ComponentNotInstalled(f"No install folders under {plugin_root}")

        latest = max(folders, key=version_sort_key)
        return host.path.join(plugin_root, latest)


class InstallationLocator:
    """Tries resolvers in order; the first one to return a root wins."""

    def __init__(self, resolvers: Sequence[InstallRootResolver]):
        self.resolvers = list(resolvers)

    @classmethod
    def default(cls, settings: MitigationSettings) -> "InstallationLocator":
        return cls([ProcessAnchorResolver(settings), DirectoryScanResolver(settings)])

    def locate(self, host: NodeHost, owned: List[ProcessObservation]) -> str:
        """Return the install root; ComponentNotInstalled propagates from resolvers."""
        for resolver in self.resolvers:
            root = resolver.resolve(host, owned)
            if root:
                logger.debug(f"Install root {root} found by {resolver.name} strategy")
                return root
        raise InstallFolderNotFound("Unable to determine installation folder")
