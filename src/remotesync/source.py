"""Data source interface.

A data source tells a :class:`~remotesync.remote.Remote` how bundled
assets, cached data and remote data are loaded, saved and listened to.
Only ``cache``, ``save`` and ``fetch`` are mandatory.
"""

from __future__ import annotations

import abc
import asyncio
import os
from collections.abc import AsyncIterator
from pathlib import Path

from remotesync.config import AssetRoot
from remotesync.exceptions import SubscriptionNotSupportedError
from remotesync.state.merge import Value


async def read_asset(root: AssetRoot | None, name: str, path: str) -> str:
    """Read ``<root>/<name>/<path>`` as text; ``""`` when there is nothing to read."""
    if root is None:
        return ""
    base = Path(root) if isinstance(root, (str, os.PathLike)) else root
    target = base.joinpath(name).joinpath(path)
    if not target.is_file():
        return ""
    return await asyncio.to_thread(target.read_text, encoding="utf-8")


async def _unsupported_stream(path: str) -> AsyncIterator[Value | None]:
    raise SubscriptionNotSupportedError(f"Stream not implemented for {path}")
    yield  # pragma: no cover


class DataSource(abc.ABC):
    """Supplies asset, cache, save, fetch and listen for each path.

    Parameters
    ----------
    asset_root : str, PathLike or Traversable, optional
        Where the default :meth:`asset` looks for bundled defaults. Once a
        remote has a data source, ``RemoteConfig.asset_root`` is ignored.
    """

    def __init__(self, *, asset_root: AssetRoot | None = None) -> None:
        self.asset_root = asset_root

    async def asset(self, name: str, path: str) -> str:
        """Raw JSON text of the bundled defaults for *path* (``"<path>.json"``)."""
        return await read_asset(self.asset_root, name, path)

    @abc.abstractmethod
    async def cache(self, name: str, path: str) -> Value | None:
        """Load the locally cached value, if any."""

    @abc.abstractmethod
    async def save(self, name: str, path: str, data: Value | None) -> bool:
        """Replace the cached value; return ``False`` if it was not kept."""

    @abc.abstractmethod
    async def fetch(self, name: str, path: str) -> Value | None:
        """Fetch the remote value. May raise :class:`TimeoutError`."""

    def listen(self, name: str, path: str) -> AsyncIterator[Value | None]:
        """Live changes for *path*. The default stream fails immediately."""
        return _unsupported_stream(path)

    async def on_loading_started(self) -> None:
        """Called before an initial load batch starts."""

    async def on_loading_finished(self) -> None:
        """Called once every symmetric path of a batch has loaded."""

    async def on_path_ready(self, name: str, path: str) -> None:
        """Called after an initial or reload commit for *path*."""

    async def on_path_changed(self, name: str, path: str) -> None:
        """Called after a live change was committed for *path*."""
