"""Fleet dispatch and aggregation."""

from .dispatcher import NodeDispatcher
from .orchestrator import FleetOrchestrator

__all__ = ["NodeDispatcher", "FleetOrchestrator"]
