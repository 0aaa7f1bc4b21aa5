"""Remote configuration for remotesync."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Iterable
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

from remotesync._constants import DEFAULT_NAME, ENV_PREFIX
from remotesync.exceptions import RemoteConfigError

AssetRoot = str | os.PathLike[str] | Traversable


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_paths(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _ordered_unique(paths: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for path in paths:
        seen.setdefault(path, None)
    return tuple(seen)


@dataclasses.dataclass(frozen=True)
class RemoteConfig:
    """Static configuration of one :class:`~remotesync.remote.Remote`.

    Parameters
    ----------
    name : str
        Remote name passed to every data source call and used as the
        logger suffix (``remotesync.<name>``).
    paths : tuple of str
        Declared paths, in load order. Any iterable is accepted;
        duplicates are dropped keeping the first occurrence.
    symmetric_paths : frozenset of str
        Paths whose load is awaited before a batch is considered
        finished. Must be a subset of ``paths``.
    connected : bool
        Initial connection state. Fetching and subscribing only happen
        while connected.
    listening : bool
        Open live subscriptions after the initial load and after every
        reconnect.
    show_logs : bool
        Emit this remote's log records. ``False`` silences only this
        remote's logger adapter.
    asset_root : str, PathLike or Traversable, optional
        Directory holding bundled defaults as ``<name>/<path>.json``.
        Accepts ``importlib.resources.files("pkg") / "assets"``.
    """

    name: str = DEFAULT_NAME
    paths: tuple[str, ...] = ()
    symmetric_paths: frozenset[str] = frozenset()
    connected: bool = False
    listening: bool = True
    show_logs: bool = True
    asset_root: AssetRoot | None = None

    def __post_init__(self) -> None:
        name = self.name.strip()
        if not name:
            raise RemoteConfigError("name must be non-empty")
        if isinstance(self.paths, str) or isinstance(self.symmetric_paths, str):
            raise RemoteConfigError("paths must be a collection of path names, not a single string")
        paths = _ordered_unique(self.paths)
        if any(not isinstance(path, str) or not path for path in paths):
            raise RemoteConfigError("paths must be non-empty strings")
        symmetric = frozenset(self.symmetric_paths)
        unknown = symmetric.difference(paths)
        if unknown:
            raise RemoteConfigError(f"symmetric paths not declared in paths: {sorted(unknown)}")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "paths", paths)
        object.__setattr__(self, "symmetric_paths", symmetric)

    def is_symmetric(self, path: str) -> bool:
        return path in self.symmetric_paths

    @classmethod
    def from_env(cls, **overrides: Any) -> RemoteConfig:
        """Create configuration from environment variables.

        Reads ``REMOTESYNC_NAME``, ``REMOTESYNC_PATHS``,
        ``REMOTESYNC_SYMMETRIC_PATHS`` (comma separated),
        ``REMOTESYNC_CONNECTED``, ``REMOTESYNC_LISTENING``,
        ``REMOTESYNC_SHOW_LOGS`` and ``REMOTESYNC_ASSET_ROOT``.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RemoteConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        name = env.get(f"{ENV_PREFIX}NAME")
        if name is not None:
            config_kwargs["name"] = name

        paths = env.get(f"{ENV_PREFIX}PATHS")
        if paths is not None:
            config_kwargs["paths"] = _env_paths(paths)

        symmetric = env.get(f"{ENV_PREFIX}SYMMETRIC_PATHS")
        if symmetric is not None:
            config_kwargs["symmetric_paths"] = frozenset(_env_paths(symmetric))

        _ENV_FLAG_MAP = {
            f"{ENV_PREFIX}CONNECTED": ("connected", False),
            f"{ENV_PREFIX}LISTENING": ("listening", True),
            f"{ENV_PREFIX}SHOW_LOGS": ("show_logs", True),
        }
        for env_key, (field_name, default) in _ENV_FLAG_MAP.items():
            if field_name not in overrides:
                config_kwargs[field_name] = _env_bool(env.get(env_key), default)

        asset_root = env.get(f"{ENV_PREFIX}ASSET_ROOT")
        if asset_root:
            config_kwargs["asset_root"] = Path(asset_root)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
