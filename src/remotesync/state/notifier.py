"""Listener registry for state-change notifications."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable

_logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChangeNotifier:
    """Ordered set of zero-argument callbacks fired on every state change."""

    def __init__(self, *, logger: logging.Logger | logging.LoggerAdapter | None = None) -> None:  # type: ignore[type-arg]
        self._listeners: list[Listener] = []
        self.logger = logger if logger is not None else _logger

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that removes it again."""
        self._listeners.append(listener)
        return lambda: self.remove_listener(listener)

    def remove_listener(self, listener: Listener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def notify(self) -> None:
        # Snapshot so listeners may unregister themselves while being called.
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                self.logger.warning("State listener %r failed", listener, exc_info=True)
