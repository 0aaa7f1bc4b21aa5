"""Custom exception hierarchy for remotesync."""

from __future__ import annotations


class RemoteSyncError(Exception):
    """Base exception for all remotesync errors."""


class RemoteConfigError(RemoteSyncError):
    """Invalid or missing configuration."""


class RemoteTimeoutError(RemoteSyncError, TimeoutError):
    """A data source gave up waiting for the backend.

    Data sources may raise this (or any :class:`TimeoutError`) from
    ``fetch`` or from a ``listen`` stream.  The engine logs it with a
    dedicated connectivity message and treats it as a soft failure for
    the affected path only.
    """

    def __init__(self, message: str = "", *, path: str = "") -> None:
        self.path = path
        super().__init__(message or f"Timed out waiting for {path or 'backend'}")


class SubscriptionNotSupportedError(RemoteSyncError, NotImplementedError):
    """The data source does not provide a live change feed."""
