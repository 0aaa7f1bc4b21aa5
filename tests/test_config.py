from __future__ import annotations

from pathlib import Path

import pytest

from remotesync.config import RemoteConfig
from remotesync.exceptions import RemoteConfigError


def test_defaults() -> None:
    config = RemoteConfig()

    assert config.name == "remote"
    assert config.paths == ()
    assert config.symmetric_paths == frozenset()
    assert config.connected is False
    assert config.listening is True
    assert config.show_logs is True


def test_paths_keep_declaration_order_and_drop_duplicates() -> None:
    config = RemoteConfig(paths=["b", "a", "b", "c"], symmetric_paths={"a"})  # type: ignore[arg-type]

    assert config.paths == ("b", "a", "c")
    assert config.is_symmetric("a")
    assert not config.is_symmetric("b")


def test_symmetric_paths_must_be_declared() -> None:
    with pytest.raises(RemoteConfigError, match="not declared"):
        RemoteConfig(paths=("a",), symmetric_paths=frozenset({"a", "b"}))


def test_single_string_paths_are_rejected() -> None:
    with pytest.raises(RemoteConfigError, match="single string"):
        RemoteConfig(paths="settings")  # type: ignore[arg-type]
    with pytest.raises(RemoteConfigError, match="single string"):
        RemoteConfig(paths=("a",), symmetric_paths="a")  # type: ignore[arg-type]


def test_empty_name_is_rejected() -> None:
    with pytest.raises(RemoteConfigError):
        RemoteConfig(name="  ")


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("REMOTESYNC_NAME", "user")
    monkeypatch.setenv("REMOTESYNC_PATHS", "settings, profile ,")
    monkeypatch.setenv("REMOTESYNC_SYMMETRIC_PATHS", "settings")
    monkeypatch.setenv("REMOTESYNC_CONNECTED", "yes")
    monkeypatch.setenv("REMOTESYNC_LISTENING", "off")
    monkeypatch.setenv("REMOTESYNC_SHOW_LOGS", "garbage")
    monkeypatch.setenv("REMOTESYNC_ASSET_ROOT", str(tmp_path))

    config = RemoteConfig.from_env()

    assert config.name == "user"
    assert config.paths == ("settings", "profile")
    assert config.symmetric_paths == frozenset({"settings"})
    assert config.connected is True
    assert config.listening is False
    assert config.show_logs is True
    assert config.asset_root == tmp_path


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REMOTESYNC_NAME", "user")
    monkeypatch.setenv("REMOTESYNC_CONNECTED", "1")

    config = RemoteConfig.from_env(name="override", connected=False, paths=("a",))

    assert config.name == "override"
    assert config.connected is False
    assert config.paths == ("a",)
