"""Remote execution channels for the node procedure."""

import base64
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..config import MitigationSettings
from ..errors import ConnectivityError, RunCancelled
from ..host import NodeHost, PsutilHost
from ..mitigation import MitigationEngine
from ..model.node import NodeIdentity
from ..model.result import NodeOutcome
from ..utils.logger import get_logger

logger = get_logger(__name__)


def encode_settings(settings: MitigationSettings) -> str:
    """Pack engine settings into a shell-safe token."""
    return base64.urlsafe_b64encode(settings.model_dump_json().encode("utf-8")).decode("ascii")


def decode_settings(token: str) -> MitigationSettings:
    """Inverse of encode_settings."""
    return MitigationSettings.model_validate_json(base64.urlsafe_b64decode(token.encode("ascii")))


class RemoteChannel(ABC):
    """Runs the decision engine in the context of a target node."""

    @abstractmethod
    def execute(
        self,
        node: NodeIdentity,
        settings: MitigationSettings,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> NodeOutcome:
        """Return the engine outcome; raise ConnectivityError if the node is unreachable."""

    def close(self) -> None:
        """Release any pooled connections."""


class LocalChannel(RemoteChannel):
    """Runs the engine in this process against a locally constructed host.

    There is no in-process timeout. The orchestrator sets the cancel event when
    a node overruns, and the engine stops at its next step boundary.
    """

    def __init__(self, host_factory: Callable[[], NodeHost] = PsutilHost):
        self.host_factory = host_factory

    def execute(
        self,
        node: NodeIdentity,
        settings: MitigationSettings,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> NodeOutcome:
        if cancel is not None and cancel.is_set():
            raise ConnectivityError("cancelled before start")

        logger.debug(f"Running mitigation in-process for {node.name}")
        engine = MitigationEngine(self.host_factory(), settings, cancel=cancel)
        try:
            return engine.run()
        except RunCancelled as e:
            raise ConnectivityError(str(e)) from e
