"""Reconciliation results and observer snapshots."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LoadMode(StrEnum):
    INITIAL = "initial"
    RELOAD = "reload"
    CHANGED = "changed"


class DataLayer(StrEnum):
    LOCAL = "local"
    ASSET = "asset"
    CACHE = "cache"


class ReconcileOutcome(StrEnum):
    COMMITTED = "committed"
    EVICTED = "evicted"
    FAILED = "failed"


class ReconcileResult(BaseModel):
    """What a single ``reconcile(path, mode)`` run did to the props."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    mode: LoadMode
    outcome: ReconcileOutcome
    fetched: bool = Field(default=False, description="A remote fetch was saved to the cache layer.")
    layers: tuple[DataLayer, ...] = Field(default=(), description="Layers that contributed data, in merge order.")
    completed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def committed(self) -> bool:
        return self.outcome == ReconcileOutcome.COMMITTED


class RemoteSnapshot(BaseModel):
    """Point-in-time copy of everything a remote exposes to observers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    props: dict[str, dict[str, Any]] = Field(default_factory=dict)
    loading: bool = False
    connected: bool = False
    listening: bool = False
    subscribed: tuple[str, ...] = ()
