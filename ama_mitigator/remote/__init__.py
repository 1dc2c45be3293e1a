"""Cluster topology and remote execution collaborators."""

from .channel import LocalChannel, RemoteChannel, decode_settings, encode_settings
from .kubectl import KubectlClient, KubectlTopology
from .ssh import SshChannel
from .topology import DirectTopology, InventoryTopology, StaticTopology, TopologyProvider

__all__ = [
    "LocalChannel",
    "RemoteChannel",
    "decode_settings",
    "encode_settings",
    "KubectlClient",
    "KubectlTopology",
    "SshChannel",
    "DirectTopology",
    "InventoryTopology",
    "StaticTopology",
    "TopologyProvider",
]
