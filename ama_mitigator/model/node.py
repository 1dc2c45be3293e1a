"""Cluster, node and process models."""

from typing import List, Optional

from pydantic import BaseModel


class ClusterTarget(BaseModel):
    """A cluster submitted for mitigation."""

    name: str

    class Config:
        frozen = True


class NodeIdentity(BaseModel):
    """A member host of a cluster."""

    name: str
    cluster: str

    class Config:
        frozen = True


class ProcessObservation(BaseModel):
    """Snapshot of one running process and its parent."""

    name: str
    pid: int
    exe: Optional[str] = None
    ppid: Optional[int] = None
    cmdline: List[str] = []
    # None when the parent exited between enumeration and lookup
    parent_name: Optional[str] = None
    parent_exe: Optional[str] = None

    @property
    def has_parent(self) -> bool:
        """Check if the parent process was still around when observed."""
        return self.parent_name is not None
