"""Per-path load pipeline for :class:`remotesync.remote.Remote`.

Owns:
- fetching remote data into the cache layer
- reading the asset and cache layers
- merging them over the local value and committing or evicting
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping

from remotesync._constants import ASSET_SUFFIX, TIMEOUT_MESSAGE
from remotesync.config import RemoteConfig
from remotesync.source import DataSource, read_asset
from remotesync.state.events import DataLayer, LoadMode, ReconcileOutcome, ReconcileResult
from remotesync.state.merge import Value, combine
from remotesync.state.policy import layers_for, should_fetch
from remotesync.state.store import PropsStore

_LOG_VERBS: dict[LoadMode, str] = {
    LoadMode.INITIAL: "loaded",
    LoadMode.RELOAD: "reloaded",
    LoadMode.CHANGED: "changed",
}


class Reconciler:
    def __init__(
        self,
        *,
        config: RemoteConfig,
        data_source: DataSource | None,
        store: PropsStore,
        is_connected: Callable[[], bool],
        notify: Callable[[], None],
        logger: logging.Logger | logging.LoggerAdapter,  # type: ignore[type-arg]
    ) -> None:
        self._config = config
        self._source = data_source
        self._store = store
        self._is_connected = is_connected
        self._notify = notify
        self._logger = logger

    @property
    def name(self) -> str:
        return self._config.name

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    async def _asset(self, path: str) -> Value | None:
        filename = f"{path}{ASSET_SUFFIX}"
        try:
            if self._source is not None:
                raw = await self._source.asset(self.name, filename)
            else:
                raw = await read_asset(self._config.asset_root, self.name, filename)
            if not raw:
                return None
            decoded = json.loads(raw)
        except Exception:
            self._logger.warning("Asset read failed for %s", path, exc_info=True)
            return None
        if not isinstance(decoded, dict):
            self._logger.debug("Asset for %s is not a JSON object; ignored", path)
            return None
        return decoded

    async def _cached(self, path: str) -> Value | None:
        if self._source is None:
            return None
        try:
            return await self._source.cache(self.name, path)
        except Exception:
            self._logger.warning("Cache read failed for %s", path, exc_info=True)
            return None

    async def save(self, path: str, data: Value | None) -> bool:
        """Persist *data* into the cache layer; ``False`` on any failure."""
        if self._source is None:
            return False
        try:
            return bool(await self._source.save(self.name, path, data))
        except Exception:
            self._logger.warning("Cache save failed for %s", path, exc_info=True)
            return False

    async def _fetch(self, path: str) -> bool:
        """Fetch *path* and save it as-is. Returns whether the result was kept."""
        if self._source is None or not self._is_connected():
            return False
        try:
            data = await self._source.fetch(self.name, path)
        except TimeoutError:
            self._logger.warning(TIMEOUT_MESSAGE, path)
            return False
        except Exception:
            self._logger.warning("Fetch failed for %s", path, exc_info=True)
            return False
        return await self.save(path, data)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def reconcile(self, path: str, mode: LoadMode) -> ReconcileResult:
        """Run fetch → merge → commit-or-evict for one path. Never raises."""
        try:
            fetched = await self._fetch(path) if should_fetch(mode) else False
            data: Value = {}
            used: list[DataLayer] = []
            for layer in layers_for(mode):
                if layer == DataLayer.LOCAL:
                    overlay = self._store.get(path)
                elif layer == DataLayer.ASSET:
                    overlay = await self._asset(path)
                else:
                    overlay = await self._cached(path)
                if isinstance(overlay, Mapping) and overlay:
                    data = combine(data, overlay)
                    used.append(layer)

            if not data:
                self._store.evict(path)
                return ReconcileResult(path=path, mode=mode, outcome=ReconcileOutcome.EVICTED, fetched=fetched)

            self._store.commit(path, data)
        except Exception:
            self._logger.warning("Reconcile failed for %s (%s)", path, mode, exc_info=True)
            return ReconcileResult(path=path, mode=mode, outcome=ReconcileOutcome.FAILED)

        if mode == LoadMode.CHANGED:
            self._notify()
        self._logger.debug("%s properties %s!", path, _LOG_VERBS[mode])
        await self._run_hook(path, mode)
        return ReconcileResult(
            path=path,
            mode=mode,
            outcome=ReconcileOutcome.COMMITTED,
            fetched=fetched,
            layers=tuple(used),
        )

    async def _run_hook(self, path: str, mode: LoadMode) -> None:
        if self._source is None:
            return
        try:
            if mode == LoadMode.CHANGED:
                await self._source.on_path_changed(self.name, path)
            else:
                await self._source.on_path_ready(self.name, path)
        except Exception:
            self._logger.warning("Lifecycle hook failed for %s (%s)", path, mode, exc_info=True)
