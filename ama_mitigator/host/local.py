"""NodeHost backed by psutil and the local filesystem."""

import os
import time
from typing import List, Optional

import psutil

from ..errors import HostError
from ..model.node import ProcessObservation
from ..utils.logger import get_logger
from .base import NodeHost

logger = get_logger(__name__)

PROCESS_ATTRS = ["pid", "name", "exe", "ppid", "cmdline"]


class PsutilHost(NodeHost):
    """The machine this interpreter runs on."""

    def list_processes(self) -> List[ProcessObservation]:
        observations = []
        for proc in psutil.process_iter(PROCESS_ATTRS):
            info = proc.info
            if not info.get("name"):
                continue
            parent_name, parent_exe = self._describe_parent(info.get("ppid"))
            observations.append(
                ProcessObservation(
                    name=info["name"],
                    pid=info["pid"],
                    exe=info.get("exe") or None,
                    ppid=info.get("ppid"),
                    cmdline=info.get("cmdline") or [],
                    parent_name=parent_name,
                    parent_exe=parent_exe,
                )
            )
        return observations

    def _describe_parent(self, ppid: Optional[int]):
        """Return (name, exe) of the parent, (None, None) if it is gone."""
        if not ppid:
            return None, None
        try:
            parent = psutil.Process(ppid)
            name = parent.name()
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            return None, None
        except psutil.AccessDenied:
            logger.debug(f"Access denied reading parent PID {ppid}")
            return None, None

        try:
            exe = parent.exe() or None
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            exe = None
        return name, exe

    def stop_process(self, pid: int) -> None:
        try:
            psutil.Process(pid).kill()
        except psutil.NoSuchProcess:
            logger.debug(f"PID {pid} already exited")
        except (psutil.AccessDenied, OSError) as e:
            raise HostError(str(e) or type(e).__name__) from e

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def rename(self, src: str, dst: str) -> None:
        os.rename(src, dst)

    def list_subdirectories(self, path: str) -> Optional[List[str]]:
        if not os.path.isdir(path):
            return None
        with os.scandir(path) as entries:
            return sorted(entry.name for entry in entries if entry.is_dir())

    def settle(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
