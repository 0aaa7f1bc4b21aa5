from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import pytest

from remotesync.config import RemoteConfig
from remotesync.memory import InMemoryDataSource
from remotesync.remote import Remote
from remotesync.state.merge import Value


class _StuckStream:
    """Feed that never yields and fails to close."""

    def __init__(self) -> None:
        self._never = asyncio.Event()

    def __aiter__(self) -> _StuckStream:
        return self

    async def __anext__(self) -> Value | None:
        await self._never.wait()
        raise StopAsyncIteration

    async def aclose(self) -> None:
        raise RuntimeError("cannot close")


class StuckSettingsSource(InMemoryDataSource):
    def listen(self, name: str, path: str) -> AsyncIterator[Value | None]:
        if path == "settings":
            return _StuckStream()
        return super().listen(name, path)


def _config(**overrides: object) -> RemoteConfig:
    kwargs: dict[str, object] = {
        "name": "user",
        "paths": ("settings", "profile"),
        "symmetric_paths": frozenset({"settings"}),
        "connected": False,
        "listening": True,
    }
    kwargs.update(overrides)
    return RemoteConfig(**kwargs)  # type: ignore[arg-type]


def _source() -> InMemoryDataSource:
    return InMemoryDataSource(
        cached={"settings": {"theme": "dark"}},
        remote={"settings": {"theme": "light"}, "profile": {"nick": "rafi"}},
    )


@pytest.mark.asyncio
async def test_disconnected_start_neither_fetches_nor_subscribes() -> None:
    source = _source()
    remote = Remote(source)

    await remote.initialize(_config())
    await remote.drain()

    assert remote.connected is False
    assert remote.subscribed == ()
    assert source.call_count("fetch", "settings") == 0
    assert remote.props == {"settings": {"theme": "dark"}}


@pytest.mark.asyncio
async def test_connecting_reloads_notifies_and_resubscribes() -> None:
    source = _source()
    remote = Remote(source)
    await remote.initialize(_config())
    await remote.drain()
    notified: list[bool] = []
    remote.add_listener(lambda: notified.append(remote.loading))

    await remote.change_connection(True)
    await remote.drain()

    assert remote.connected is True
    assert remote.props == {"settings": {"theme": "light"}, "profile": {"nick": "rafi"}}
    assert notified == [False]
    assert remote.subscribed == ("settings", "profile")
    assert source.feed_count("settings") == 1

    await remote.dispose()


@pytest.mark.asyncio
async def test_same_state_is_a_noop() -> None:
    source = _source()
    remote = Remote(source)
    await remote.initialize(_config(connected=True))
    await remote.drain()
    fetches = source.call_count("fetch", "settings")
    subscription = remote._subscriptions.get("settings")  # noqa: SLF001

    await remote.change_connection(True)

    assert source.call_count("fetch", "settings") == fetches
    assert remote._subscriptions.get("settings") is subscription  # noqa: SLF001

    await remote.dispose()


@pytest.mark.asyncio
async def test_disconnecting_cancels_subscriptions_and_keeps_props() -> None:
    source = _source()
    remote = Remote(source)
    await remote.initialize(_config(connected=True))
    await remote.drain()
    assert remote.subscribed == ("settings", "profile")

    await remote.change_connection(False)

    assert remote.connected is False
    assert remote.subscribed == ()
    assert source.feed_count("settings") == 0
    assert source.feed_count("profile") == 0
    assert remote.props["settings"] == {"theme": "light"}


@pytest.mark.asyncio
async def test_reconnect_without_listening_does_not_subscribe() -> None:
    source = _source()
    remote = Remote(source)
    await remote.initialize(_config(listening=False))

    await remote.change_connection(True)
    await remote.drain()

    assert source.call_count("fetch", "settings") == 1
    assert remote.subscribed == ()


@pytest.mark.asyncio
async def test_resubscribe_enables_listening() -> None:
    source = _source()
    remote = Remote(source)
    await remote.initialize(_config(connected=True, listening=False))
    assert remote.listening is False

    await remote.resubscribe()
    await remote.drain()

    assert remote.listening is True
    assert remote.subscribed == ("settings", "profile")

    await remote.cancel_subscriptions()
    assert remote.subscribed == ()


@pytest.mark.asyncio
async def test_disconnecting_clears_table_even_when_a_cancel_fails(caplog: pytest.LogCaptureFixture) -> None:
    source = StuckSettingsSource(remote={"settings": {"theme": "light"}, "profile": {"nick": "rafi"}})
    remote = Remote(source)
    await remote.initialize(_config(connected=True))
    await remote.drain()
    assert remote.subscribed == ("settings", "profile")

    with caplog.at_level(logging.WARNING, logger="remotesync"):
        await remote.change_connection(False)

    assert remote.connected is False
    assert remote.subscribed == ()
    assert source.feed_count("profile") == 0
    assert "stream subscription[settings] failed to cancel" in caplog.text
    assert remote.props["profile"] == {"nick": "rafi"}
