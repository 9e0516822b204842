"""RemoteUser reconciliation core."""

from .filters import ResourceVersionTracker, remote_user_changed
from .indexer import SecretRefIndex
from .prober import ProbeResult, probe_authentication
from .status import StatusWriter

__all__ = [
    "ProbeResult",
    "ResourceVersionTracker",
    "SecretRefIndex",
    "StatusWriter",
    "probe_authentication",
    "remote_user_changed",
]
