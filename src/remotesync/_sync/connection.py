"""Connection state machine for :class:`remotesync.remote.Remote`.

The only place where subscriptions are torn down or rebuilt as a unit.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from remotesync._sync.subscriptions import SubscriptionManager


class ConnectionController:
    """Connected/disconnected state plus the ``listening`` flag.

    Parameters
    ----------
    subscriptions : SubscriptionManager
        Feeds to cancel on disconnect and rebuild on reconnect.
    reload : callable
        Awaited on reconnect, before resubscribing; expected to reload
        every declared path and notify observers.
    connected : bool
        Initial state.
    listening : bool
        Whether a reconnect resubscribes.
    """

    def __init__(
        self,
        *,
        subscriptions: SubscriptionManager,
        reload: Callable[[], Awaitable[None]],
        connected: bool,
        listening: bool,
        logger: logging.Logger | logging.LoggerAdapter,  # type: ignore[type-arg]
    ) -> None:
        self._subscriptions = subscriptions
        self._reload = reload
        self._connected = connected
        self._listening = listening
        self._logger = logger

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def listening(self) -> bool:
        return self._listening

    async def set_connected(self, value: bool) -> bool:
        """Transition to *value*; returns ``False`` when already there."""
        if self._connected == value:
            return False
        self._connected = value
        if not value:
            self._logger.debug("disconnected; canceling subscriptions")
            await self.cancel_subscriptions()
            return True
        self._logger.debug("connected; reloading properties")
        try:
            await self._reload()
        except Exception:
            self._logger.warning("Reload after reconnect failed", exc_info=True)
        if self._listening:
            await self.resubscribe()
        return True

    async def resubscribe(self) -> None:
        """Enable listening and rebuild a feed for every declared path."""
        self._listening = True
        try:
            await self._subscriptions.subscribe_all()
        except Exception:
            self._logger.warning("Resubscribe failed", exc_info=True)

    async def cancel_subscriptions(self) -> None:
        try:
            await self._subscriptions.unsubscribe_all()
        except Exception:
            self._logger.warning("Canceling subscriptions failed", exc_info=True)
