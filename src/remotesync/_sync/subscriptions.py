"""Live subscriptions for :class:`remotesync.remote.Remote`.

Owns:
- at most one live feed per path
- the delivery handler: dedup → save → changed reconcile
- best-effort teardown of every feed
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Coroutine, Iterable
from dataclasses import dataclass
from typing import Any

from remotesync._constants import TIMEOUT_MESSAGE
from remotesync._sync.reconcile import Reconciler
from remotesync.config import RemoteConfig
from remotesync.source import DataSource
from remotesync.state.events import LoadMode
from remotesync.state.merge import Value
from remotesync.state.policy import should_apply_delivery
from remotesync.state.store import PropsStore


@dataclass(slots=True)
class Subscription:
    """A live feed for one path and the task consuming it."""

    path: str
    stream: AsyncIterator[Value | None]
    task: asyncio.Task[None]

    async def cancel(self) -> None:
        """Stop consuming the feed and close it.

        Delivery handlers already dispatched keep running. A cancellation
        aimed at the caller is propagated once the feed is closed.
        """
        self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        finally:
            aclose = getattr(self.stream, "aclose", None)
            if aclose is not None:
                await aclose()


class SubscriptionManager:
    def __init__(
        self,
        *,
        config: RemoteConfig,
        data_source: DataSource | None,
        store: PropsStore,
        reconciler: Reconciler,
        is_connected: Callable[[], bool],
        logger: logging.Logger | logging.LoggerAdapter,  # type: ignore[type-arg]
    ) -> None:
        self._config = config
        self._source = data_source
        self._store = store
        self._reconciler = reconciler
        self._is_connected = is_connected
        self._logger = logger
        self._subscriptions: dict[str, Subscription] = {}
        self._tasks: set[asyncio.Task[Any]] = set()
        self._subscribing: set[asyncio.Task[Any]] = set()

    @property
    def subscribed(self) -> tuple[str, ...]:
        return tuple(self._subscriptions)

    def get(self, path: str) -> Subscription | None:
        return self._subscriptions.get(path)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ------------------------------------------------------------------
    # Subscribe
    # ------------------------------------------------------------------

    async def subscribe(self, path: str) -> None:
        """Replace the feed for *path*; opens nothing while disconnected."""
        if self._source is None:
            return
        await self._cancel(self._subscriptions.pop(path, None))
        if not self._is_connected():
            return
        try:
            stream = self._source.listen(self._config.name, path)
        except TimeoutError:
            self._logger.warning(TIMEOUT_MESSAGE, path)
            return
        except Exception:
            self._logger.warning("stream subscription[%s] could not be opened", path, exc_info=True)
            return
        task = asyncio.create_task(self._consume(path, stream), name=f"remotesync:{self._config.name}:{path}")
        # Another subscribe for this path may have finished while we were cancelling.
        raced = self._subscriptions.pop(path, None)
        self._subscriptions[path] = Subscription(path=path, stream=stream, task=task)
        await self._cancel(raced)

    async def _cancel(self, subscription: Subscription | None) -> None:
        if subscription is None:
            return
        try:
            await subscription.cancel()
        except Exception:
            self._logger.warning("stream subscription[%s] failed to cancel", subscription.path, exc_info=True)

    async def subscribe_all(self, paths: Iterable[str] | None = None) -> None:
        """Subscribe *paths*, or every declared path after a full teardown."""
        requested = tuple(paths) if paths is not None else ()
        if not requested:
            await self.unsubscribe_all()
            requested = self._config.paths
        for path in requested:
            if self._config.is_symmetric(path):
                await self.subscribe(path)
            else:
                task = self._spawn(self.subscribe(path))
                self._subscribing.add(task)
                task.add_done_callback(self._subscribing.discard)
            self._logger.debug("stream subscription[%s] created!", path)

    async def _consume(self, path: str, stream: AsyncIterator[Value | None]) -> None:
        try:
            async for data in stream:
                # Handlers are independent of the feed so cancelling it never
                # interrupts a delivery that is already being applied.
                self._spawn(self._on_data(path, data))
        except TimeoutError:
            self._logger.warning(TIMEOUT_MESSAGE, path)
        except Exception:
            self._logger.warning("stream subscription[%s] failed", path, exc_info=True)

    async def _on_data(self, path: str, data: Value | None) -> None:
        try:
            if not should_apply_delivery(data, self._store.get(path)):
                self._logger.debug("stream subscription[%s] delivery ignored", path)
                return
            kept = await self._reconciler.save(path, data)
            if not kept:
                return
            await self._reconciler.reconcile(path, LoadMode.CHANGED)
        except Exception:
            self._logger.warning("stream subscription[%s] delivery failed", path, exc_info=True)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def unsubscribe_all(self) -> None:
        """Cancel every feed; one failing cancel never blocks the others.

        Subscribe calls still running in the background are cancelled
        first so none of them can open a feed afterwards.
        """
        pending = [task for task in self._subscribing if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        for subscription in subscriptions:
            try:
                await subscription.cancel()
                self._logger.debug("stream subscription[%s] canceled!", subscription.path)
            except Exception:
                self._logger.warning(
                    "stream subscription[%s] failed to cancel", subscription.path, exc_info=True
                )

    async def drain(self) -> None:
        """Wait for dispatched subscribe calls and delivery handlers."""
        while True:
            # Let feeds hand over anything already queued.
            await asyncio.sleep(0)
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
