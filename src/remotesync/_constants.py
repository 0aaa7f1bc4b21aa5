"""Internal constants for remotesync."""

from __future__ import annotations

#: Name used when a :class:`~remotesync.remote.Remote` has not been configured.
DEFAULT_NAME = "remote"

#: Suffix appended to a path when reading its bundled asset.
ASSET_SUFFIX = ".json"

#: Root logger name; each remote logs on a child named after it.
LOGGER_NAME = "remotesync"

#: Prefix for environment variables read by ``RemoteConfig.from_env``.
ENV_PREFIX = "REMOTESYNC_"

TIMEOUT_MESSAGE = "Timeout while connecting to %s. Please check your connection."
