"""remotesync - Layered asset/cache/remote data synchronization for asyncio."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("remotesync")
except PackageNotFoundError:
    __version__ = "0+local"
from remotesync.config import RemoteConfig
from remotesync.exceptions import (
    RemoteConfigError,
    RemoteSyncError,
    RemoteTimeoutError,
    SubscriptionNotSupportedError,
)
from remotesync.memory import InMemoryDataSource
from remotesync.remote import Remote
from remotesync.source import DataSource
from remotesync.state.events import (
    DataLayer,
    LoadMode,
    ReconcileOutcome,
    ReconcileResult,
    RemoteSnapshot,
)
from remotesync.state.merge import Value, combine

__all__ = [
    "__version__",
    "DataLayer",
    "DataSource",
    "InMemoryDataSource",
    "LoadMode",
    "ReconcileOutcome",
    "ReconcileResult",
    "Remote",
    "RemoteConfig",
    "RemoteConfigError",
    "RemoteSnapshot",
    "RemoteSyncError",
    "RemoteTimeoutError",
    "SubscriptionNotSupportedError",
    "Value",
    "combine",
]
