"""In-memory data source.

Keeps assets, cache and remote values in dictionaries and offers a
queue-backed live feed. Useful for tests, demos and as a reference for
writing real data sources.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator, Mapping
from typing import Any

from remotesync.config import AssetRoot
from remotesync.source import DataSource
from remotesync.state.merge import Value

_CLOSE = object()


class InMemoryDataSource(DataSource):
    """Dictionary-backed :class:`~remotesync.source.DataSource`.

    ``assets`` is keyed by asset file name (``"settings.json"``); ``cached``
    and ``remote`` are keyed by path. Every call is counted in ``calls``
    as ``"<method>:<path>"``.
    """

    def __init__(
        self,
        *,
        assets: Mapping[str, str] | None = None,
        cached: Mapping[str, Value | None] | None = None,
        remote: Mapping[str, Value | None] | None = None,
        asset_root: AssetRoot | None = None,
    ) -> None:
        super().__init__(asset_root=asset_root)
        self.assets: dict[str, str] = dict(assets or {})
        self.cached: dict[str, Value | None] = dict(cached or {})
        self.remote: dict[str, Value | None] = dict(remote or {})
        self.calls: dict[str, int] = {}
        self.save_result = True
        self._feeds: dict[str, list[_Feed]] = {}

    def _record_call(self, method: str, path: str) -> None:
        key = f"{method}:{path}"
        self.calls[key] = self.calls.get(key, 0) + 1

    def call_count(self, method: str, path: str) -> int:
        return self.calls.get(f"{method}:{path}", 0)

    async def asset(self, name: str, path: str) -> str:
        self._record_call("asset", path)
        if path in self.assets:
            return self.assets[path]
        return await super().asset(name, path)

    async def cache(self, name: str, path: str) -> Value | None:
        self._record_call("cache", path)
        return copy.deepcopy(self.cached.get(path))

    async def save(self, name: str, path: str, data: Value | None) -> bool:
        self._record_call("save", path)
        if not self.save_result:
            return False
        self.cached[path] = copy.deepcopy(data)
        return True

    async def fetch(self, name: str, path: str) -> Value | None:
        self._record_call("fetch", path)
        return copy.deepcopy(self.remote.get(path))

    def listen(self, name: str, path: str) -> AsyncIterator[Value | None]:
        self._record_call("listen", path)
        feed = _Feed(self, path)
        self._feeds.setdefault(path, []).append(feed)
        return feed

    def _detach(self, feed: _Feed) -> None:
        feeds = self._feeds.get(feed.path)
        if feeds is not None and feed in feeds:
            feeds.remove(feed)
            if not feeds:
                self._feeds.pop(feed.path, None)

    def publish(self, path: str, value: Value | None) -> None:
        """Deliver *value* to every open feed for *path*."""
        self.remote[path] = copy.deepcopy(value)
        for feed in list(self._feeds.get(path, [])):
            feed.put(copy.deepcopy(value))

    def fail(self, path: str, exc: BaseException) -> None:
        """Make every open feed for *path* raise *exc*."""
        for feed in list(self._feeds.get(path, [])):
            feed.put(exc)

    def close(self, path: str) -> None:
        """End every open feed for *path*."""
        for feed in list(self._feeds.get(path, [])):
            feed.put(_CLOSE)

    def feed_count(self, path: str) -> int:
        return len(self._feeds.get(path, []))


class _Feed:
    """Live feed for one ``listen`` call; closing it detaches it from the source."""

    def __init__(self, source: InMemoryDataSource, path: str) -> None:
        self.path = path
        self._source = source
        # Created eagerly so values published before the first read are kept.
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    def put(self, item: Any) -> None:
        self._queue.put_nowait(item)

    def __aiter__(self) -> _Feed:
        return self

    async def __anext__(self) -> Value | None:
        if self._closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSE:
            await self.aclose()
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self._closed = True
        self._source._detach(self)
