"""High-level async facade over the remotesync engine."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Mapping
from typing import Any, Generic, TypeVar

from remotesync._log import RemoteLogger
from remotesync._sync.connection import ConnectionController
from remotesync._sync.reconcile import Reconciler
from remotesync._sync.subscriptions import SubscriptionManager
from remotesync.config import RemoteConfig
from remotesync.source import DataSource
from remotesync.state.events import LoadMode, RemoteSnapshot
from remotesync.state.merge import Value
from remotesync.state.notifier import ChangeNotifier, Listener
from remotesync.state.store import PropsStore

DataSourceT = TypeVar("DataSourceT", bound=DataSource)


class Remote(Generic[DataSourceT]):
    """Merged, live view of a set of paths.

    Each declared path is loaded from three layers (bundled asset, cache,
    remote fetch persisted into the cache) and kept up to date by a live
    feed while connected.

    Usage::

        remote = Remote(MyDataSource())
        await remote.initialize(RemoteConfig(name="user", paths=("settings",), connected=True))
        remote.add_listener(lambda: print(remote.props))
        ...
        await remote.dispose()

    Or as an async context manager, which disposes on exit::

        async with Remote(MyDataSource()) as remote:
            await remote.initialize(config)
    """

    def __init__(self, data_source: DataSourceT | None = None) -> None:
        self._data_source = data_source
        self._store = PropsStore()
        self._notifier = ChangeNotifier()
        self._loading = False
        self._on_ready: Callable[[], None] | None = None
        self._background: set[asyncio.Task[Any]] = set()
        self._configure(RemoteConfig(connected=False, listening=False))

    def _configure(self, config: RemoteConfig) -> None:
        self._config = config
        self._logger = RemoteLogger(config.name, enabled=config.show_logs)
        self._notifier.logger = self._logger
        self._reconciler = Reconciler(
            config=config,
            data_source=self._data_source,
            store=self._store,
            is_connected=lambda: self._connection.connected,
            notify=self._notifier.notify,
            logger=self._logger,
        )
        self._subscriptions = SubscriptionManager(
            config=config,
            data_source=self._data_source,
            store=self._store,
            reconciler=self._reconciler,
            is_connected=lambda: self._connection.connected,
            logger=self._logger,
        )
        self._connection = ConnectionController(
            subscriptions=self._subscriptions,
            reload=lambda: self.reload(notifiable=True),
            connected=config.connected,
            listening=config.listening,
            logger=self._logger,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Remote[DataSourceT]:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    # Observer surface
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> RemoteConfig:
        return self._config

    @property
    def paths(self) -> tuple[str, ...]:
        return self._config.paths

    @property
    def data_source(self) -> DataSourceT | None:
        return self._data_source

    @property
    def props(self) -> Mapping[str, Value]:
        """Read-only live view of the merged value per path."""
        return self._store.view

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def connected(self) -> bool:
        return self._connection.connected

    @property
    def listening(self) -> bool:
        return self._connection.listening

    @property
    def subscribed(self) -> tuple[str, ...]:
        return self._subscriptions.subscribed

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* on every live change and loading toggle.

        Returns a callable that unregisters it.
        """
        return self._notifier.add_listener(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._notifier.remove_listener(listener)

    def snapshot(self) -> RemoteSnapshot:
        return RemoteSnapshot(
            name=self.name,
            props=self._store.as_dict(),
            loading=self._loading,
            connected=self.connected,
            listening=self.listening,
            subscribed=self.subscribed,
        )

    def _set_loading(self, value: bool, *, notify: bool = True) -> None:
        changed = self._loading != value
        self._loading = value
        if changed and notify:
            self._notifier.notify()

    def _ready(self) -> None:
        if self._on_ready is not None:
            self._on_ready()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def initialize(self, config: RemoteConfig, *, on_ready: Callable[[], None] | None = None) -> None:
        """Apply *config*, load every path and, if listening, subscribe.

        Symmetric paths are loaded one after another before this returns;
        the others load in the background. *on_ready* is called once the
        symmetric loads are done, and again after every :meth:`reload`.
        """
        await self._subscriptions.unsubscribe_all()
        self._configure(config)
        self._on_ready = on_ready
        await self._load_all()
        if self._connection.listening:
            try:
                await self._subscriptions.subscribe_all()
            except Exception:
                self._logger.warning("Initial subscribe failed", exc_info=True)

    async def _dispatch(self, mode: LoadMode) -> None:
        for path in self._config.paths:
            if self._config.is_symmetric(path):
                await self._reconciler.reconcile(path, mode)
            else:
                self._spawn(self._reconciler.reconcile(path, mode))

    async def _load_all(self) -> None:
        try:
            self._set_loading(True)
            if self._data_source is not None:
                await self._data_source.on_loading_started()
            await self._dispatch(LoadMode.INITIAL)
            self._set_loading(False)
            self._logger.debug("all symmetric properties loaded!")
            if self._data_source is not None:
                await self._data_source.on_loading_finished()
            self._ready()
        except Exception:
            self._set_loading(False)
            self._logger.warning("Initial load failed", exc_info=True)

    async def reload(self, *, show_loading: bool = False, notifiable: bool = True) -> None:
        """Fetch and re-merge every declared path.

        Parameters
        ----------
        show_loading : bool
            Raise :attr:`loading` while the symmetric paths reload.
        notifiable : bool
            Notify listeners once the symmetric paths have reloaded.
        """
        if show_loading:
            self._set_loading(True)
        try:
            await self._dispatch(LoadMode.RELOAD)
            if show_loading:
                self._set_loading(False, notify=False)
            if notifiable or show_loading:
                self._notifier.notify()
            self._logger.debug("all symmetric properties reloaded!")
            if self._data_source is not None:
                await self._data_source.on_loading_finished()
            self._ready()
        except Exception:
            if show_loading:
                self._set_loading(False)
            self._logger.warning("Reload failed", exc_info=True)

    # ------------------------------------------------------------------
    # Connection & subscriptions
    # ------------------------------------------------------------------

    async def change_connection(self, value: bool) -> None:
        """Switch connectivity; reconnecting reloads and resubscribes."""
        await self._connection.set_connected(value)

    async def resubscribe(self) -> None:
        await self._connection.resubscribe()

    async def cancel_subscriptions(self) -> None:
        await self._connection.cancel_subscriptions()

    async def drain(self) -> None:
        """Wait until background loads and live deliveries have settled."""
        while True:
            await self._subscriptions.drain()
            pending = [task for task in self._background if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def dispose(self) -> None:
        """Cancel every subscription. Safe to call more than once."""
        await self._connection.cancel_subscriptions()
        if self._connection.listening:
            self._logger.debug("subscriptions canceled!")
