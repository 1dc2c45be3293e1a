"""Abstract view of a node's processes and filesystem."""

import os
from abc import ABC, abstractmethod
from typing import List, Optional

from ..model.node import ProcessObservation


class NodeHost(ABC):
    """Operations the decision engine needs from the node it runs on."""

    # os.path-style module used for every path the engine builds
    path = os.path

    @abstractmethod
    def list_processes(self) -> List[ProcessObservation]:
        """Enumerate running processes with their parent resolved."""

    @abstractmethod
    def stop_process(self, pid: int) -> None:
        """Forcefully terminate a process; raise HostError on failure."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def rename(self, src: str, dst: str) -> None:
        """Rename a file; raise OSError on failure."""

    @abstractmethod
    def list_subdirectories(self, path: str) -> Optional[List[str]]:
        """Names of immediate subdirectories, or None if path is not a directory."""

    @abstractmethod
    def settle(self, seconds: float) -> None:
        """Wait for the OS to finish tearing down stopped processes."""
