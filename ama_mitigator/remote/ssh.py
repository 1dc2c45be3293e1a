"""SSH channel that runs the node agent with paramiko."""

import json
import shlex
import socket
import threading
import time
from typing import Optional

import paramiko
from pydantic import ValidationError

from ..config import FleetSettings, MitigationSettings
from ..errors import ConnectivityError, RemoteExecutionError
from ..model.node import NodeIdentity
from ..model.result import NodeOutcome
from ..utils.logger import get_logger
from .channel import RemoteChannel, encode_settings

logger = get_logger(__name__)

AGENT_MODULE = "ama_mitigator.agent"
POLL_INTERVAL = 0.5


class SshChannel(RemoteChannel):
    """Executes ``python -m ama_mitigator.agent`` on each node over SSH.

    The agent prints the engine outcome as one JSON line on stdout.
    """

    def __init__(self, fleet: Optional[FleetSettings] = None):
        self.fleet = fleet or FleetSettings()

    def build_command(self, settings: MitigationSettings) -> str:
        return " ".join(
            [
                self.fleet.remote_python,
                "-m",
                AGENT_MODULE,
                "--settings",
                shlex.quote(encode_settings(settings)),
            ]
        )

    def _connect(self, node: NodeIdentity) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        client.connect(
            hostname=node.name,
            port=self.fleet.ssh_port,
            username=self.fleet.ssh_username,
            password=self.fleet.ssh_password,
            key_filename=self.fleet.ssh_key_filename,
            timeout=self.fleet.connect_timeout,
            banner_timeout=self.fleet.connect_timeout,
            auth_timeout=self.fleet.connect_timeout,
        )
        return client

    def execute(
        self,
        node: NodeIdentity,
        settings: MitigationSettings,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> NodeOutcome:
        client = None
        try:
            client = self._connect(node)
            _, stdout, stderr = client.exec_command(self.build_command(settings), timeout=timeout)
            self._wait(stdout.channel, timeout, cancel)

            exit_status = stdout.channel.recv_exit_status()
            output = stdout.read().decode("utf-8", errors="replace")
            errors = stderr.read().decode("utf-8", errors="replace")
        except paramiko.AuthenticationException as e:
            raise ConnectivityError(f"authentication failed: {e}") from e
        except paramiko.SSHException as e:
            raise ConnectivityError(f"SSH error: {e}") from e
        except (socket.timeout, TimeoutError) as e:
            raise ConnectivityError(f"timed out: {e}") from e
        except OSError as e:
            raise ConnectivityError(str(e) or type(e).__name__) from e
        finally:
            if client is not None:
                client.close()

        if errors:
            logger.debug(f"[{node.name}] agent stderr: {errors.strip()}")
        return self.parse_outcome(node, output, exit_status, errors)

    def _wait(self, channel, timeout: Optional[float], cancel: Optional[threading.Event]) -> None:
        """Block until the remote command exits, honouring timeout and cancel."""
        deadline = time.monotonic() + timeout if timeout else None
        while not channel.exit_status_ready():
            if cancel is not None and cancel.is_set():
                raise ConnectivityError("cancelled")
            if deadline is not None and time.monotonic() >= deadline:
                raise ConnectivityError(f"timed out after {timeout:g}s")
            time.sleep(POLL_INTERVAL)

    @staticmethod
    def parse_outcome(node: NodeIdentity, output: str, exit_status: int, errors: str = "") -> NodeOutcome:
        """Read the last JSON line the agent printed."""
        lines = [line for line in output.splitlines() if line.strip()]
        if lines:
            try:
                return NodeOutcome.model_validate_json(lines[-1])
            except (ValidationError, json.JSONDecodeError, ValueError):
                logger.error(f"[{node.name}] unreadable agent output: {lines[-1]!r}")

        detail = errors.strip().splitlines()[-1] if errors.strip() else "no outcome returned"
        raise RemoteExecutionError(f"agent exited with status {exit_status}: {detail}")
