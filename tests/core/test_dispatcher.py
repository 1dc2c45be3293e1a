"""Test the node dispatcher."""

from unittest.mock import Mock

from ama_mitigator.core import NodeDispatcher
from ama_mitigator.errors import ConnectivityError, RemoteExecutionError
from ama_mitigator.model.node import NodeIdentity
from ama_mitigator.model.result import NodeOutcome, NodeStatus
from ama_mitigator.remote import LocalChannel

from conftest import FakeHost

NODE = NodeIdentity(name="node-1", cluster="C1")


class TestNodeDispatcher:
    def test_outcome_is_tagged_with_node(self, settings):
        channel = Mock()
        channel.execute.return_value = NodeOutcome(
            status=NodeStatus.SUCCESS, message="Mitigation already applied", component_version="1.39.0.0"
        )

        result = NodeDispatcher(channel, settings).dispatch(NODE, timeout=12)

        assert result.cluster_name == "C1"
        assert result.node_name == "node-1"
        assert result.status == NodeStatus.SUCCESS
        assert result.component_version == "1.39.0.0"
        channel.execute.assert_called_once_with(NODE, settings, timeout=12, cancel=None)

    def test_connectivity_error_becomes_fail(self, settings):
        channel = Mock()
        channel.execute.side_effect = ConnectivityError("WinRM cannot complete the operation")

        result = NodeDispatcher(channel, settings).dispatch(NODE)

        assert result.status == NodeStatus.FAIL
        assert result.message == "Failed to connect to node: WinRM cannot complete the operation"
        assert result.component_version == "N/A"

    def test_other_errors_are_distinguished(self, settings):
        channel = Mock()
        channel.execute.side_effect = RemoteExecutionError("agent exited with status 1")

        result = NodeDispatcher(channel, settings).dispatch(NODE)

        assert result.status == NodeStatus.FAIL
        assert result.message.startswith("Remote invocation failed")

    def test_engine_failures_pass_through(self, settings):
        channel = LocalChannel(lambda: FakeHost(directories={settings.plugin_root: ["garbage"]}))

        result = NodeDispatcher(channel, settings).dispatch(NODE)

        assert result.status == NodeStatus.FAIL
        assert "folder name" in result.message
