"""Merge and delivery policy.

No I/O here: which layers a load mode overlays, and whether a value
delivered by a live feed is worth persisting.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from remotesync.state.events import DataLayer, LoadMode

_LAYERS: dict[LoadMode, tuple[DataLayer, ...]] = {
    LoadMode.INITIAL: (DataLayer.LOCAL, DataLayer.ASSET, DataLayer.CACHE),
    LoadMode.RELOAD: (DataLayer.LOCAL, DataLayer.ASSET, DataLayer.CACHE),
    # The delivered value is already in the cache when a changed load runs.
    LoadMode.CHANGED: (DataLayer.LOCAL, DataLayer.CACHE),
}


def layers_for(mode: LoadMode) -> tuple[DataLayer, ...]:
    """Overlay order for *mode*; later layers win."""
    return _LAYERS[mode]


def should_fetch(mode: LoadMode) -> bool:
    return mode != LoadMode.CHANGED


def should_apply_delivery(delivered: Mapping[str, Any] | None, current: Mapping[str, Any] | None) -> bool:
    """Decide whether a live delivery should be saved and reconciled.

    Absent or empty deliveries are dropped, as are deliveries structurally
    equal to what the props already hold.
    """
    if not delivered:
        return False
    return delivered != current
