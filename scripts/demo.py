#!/usr/bin/env python3
"""Watch a remote converge and follow live updates.

Runs a :class:`remotesync.Remote` against an in-memory data source,
then publishes a new value every few seconds and prints the merged
props whenever listeners are notified.

Usage
-----
::

    python scripts/demo.py
    python scripts/demo.py --updates 5 --interval 0.5 --verbose

Configuration is read from ``REMOTESYNC_*`` environment variables;
command line options override them.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from remotesync import InMemoryDataSource, Remote, RemoteConfig  # noqa: E402

_THEMES = ("blue", "sepia", "dark", "light")


def _print_props(remote: Remote[InMemoryDataSource]) -> None:
    state = "loading" if remote.loading else "ready"
    print(f"[{remote.name}] {state}: {json.dumps(dict(remote.props), sort_keys=True)}")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Demonstrate layered loading and live updates.")
    parser.add_argument("--name", default=None, help="Remote name (default: REMOTESYNC_NAME or 'user')")
    parser.add_argument("--updates", type=int, default=3, help="Number of live updates to publish")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between live updates")
    parser.add_argument("--offline", action="store_true", help="Start disconnected and connect after the first load")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, object] = {"connected": not args.offline}
    if args.name:
        overrides["name"] = args.name
    config = RemoteConfig.from_env(**overrides)
    if not config.paths:
        config = RemoteConfig.from_env(
            paths=("settings", "profile"),
            symmetric_paths=frozenset({"settings"}),
            **overrides,
        )

    source = InMemoryDataSource(
        assets={"settings.json": json.dumps({"theme": "dark", "language": "en"})},
        cached={"settings": {"language": "bn"}},
        remote={"settings": {"theme": "light", "language": "en"}, "profile": {"nick": "guest"}},
    )

    async with Remote(source) as remote:
        remote.add_listener(lambda: _print_props(remote))
        await remote.initialize(config, on_ready=lambda: print(f"[{remote.name}] symmetric paths ready"))
        await remote.drain()
        _print_props(remote)

        if args.offline:
            await remote.change_connection(True)
            await remote.drain()

        for index in range(args.updates):
            await asyncio.sleep(args.interval)
            theme = _THEMES[index % len(_THEMES)]
            current = dict(remote.props.get("settings", {}))
            source.publish("settings", {**current, "theme": theme})
            await remote.drain()

        print(json.dumps(remote.snapshot().model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
