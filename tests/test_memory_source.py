from __future__ import annotations

from pathlib import Path

import pytest

from remotesync import InMemoryDataSource
from remotesync.source import read_asset


@pytest.mark.asyncio
async def test_values_are_copied_in_and_out() -> None:
    source = InMemoryDataSource(cached={"settings": {"ui": {"theme": "dark"}}})

    cached = await source.cache("user", "settings")
    assert cached is not None
    cached["ui"]["theme"] = "light"

    assert source.cached["settings"] == {"ui": {"theme": "dark"}}
    assert source.call_count("cache", "settings") == 1


@pytest.mark.asyncio
async def test_save_can_be_rejected() -> None:
    source = InMemoryDataSource()
    source.save_result = False

    assert await source.save("user", "settings", {"theme": "dark"}) is False
    assert "settings" not in source.cached


@pytest.mark.asyncio
async def test_asset_falls_back_to_asset_root(tmp_path: Path) -> None:
    (tmp_path / "user").mkdir()
    (tmp_path / "user" / "profile.json").write_text('{"nick": "guest"}', encoding="utf-8")
    source = InMemoryDataSource(assets={"settings.json": "{}"}, asset_root=tmp_path)

    assert await source.asset("user", "settings.json") == "{}"
    assert await source.asset("user", "profile.json") == '{"nick": "guest"}'
    assert await source.asset("user", "missing.json") == ""


@pytest.mark.asyncio
async def test_read_asset_without_root_is_empty() -> None:
    assert await read_asset(None, "user", "settings.json") == ""


@pytest.mark.asyncio
async def test_feed_delivers_published_values_in_order() -> None:
    source = InMemoryDataSource()
    feed = source.listen("user", "settings")

    source.publish("settings", {"theme": "dark"})
    source.publish("settings", {"theme": "light"})
    source.close("settings")

    received = [value async for value in feed]

    assert received == [{"theme": "dark"}, {"theme": "light"}]
    assert source.remote["settings"] == {"theme": "light"}
    assert source.feed_count("settings") == 0


@pytest.mark.asyncio
async def test_feed_raises_injected_failure() -> None:
    source = InMemoryDataSource()
    feed = source.listen("user", "settings")
    source.fail("settings", TimeoutError("offline"))

    with pytest.raises(TimeoutError):
        await feed.__anext__()


@pytest.mark.asyncio
async def test_closing_a_feed_detaches_it() -> None:
    source = InMemoryDataSource()
    first = source.listen("user", "settings")
    source.listen("user", "settings")
    assert source.feed_count("settings") == 2

    await first.aclose()  # type: ignore[attr-defined]

    assert source.feed_count("settings") == 1
    with pytest.raises(StopAsyncIteration):
        await first.__anext__()
