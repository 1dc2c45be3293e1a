"""Exception types shared across the mitigator."""


class MitigatorError(RuntimeError):
    """Base class for mitigator errors."""


class ConnectivityError(MitigatorError):
    """A node could not be reached, authenticated against, or finished in time."""


class ClusterUnavailable(MitigatorError):
    """The cluster itself could not be contacted."""


class NodesUnavailable(MitigatorError):
    """The cluster was reachable but its node list could not be read."""


class ComponentNotInstalled(MitigatorError):
    """The AMA extension plugin folder is absent on the node."""


class InstallFolderNotFound(MitigatorError):
    """No strategy could determine the installation folder."""


class HostError(MitigatorError):
    """A local OS operation on the node failed."""


class VersionParseError(ValueError):
    """A folder name is not a four-part numeric version."""


class RemoteExecutionError(MitigatorError):
    """The node was reached but the procedure did not return an outcome."""


class RunCancelled(MitigatorError):
    """The engine was asked to stop between steps."""
