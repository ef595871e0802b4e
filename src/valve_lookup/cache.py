# src/valve_lookup/cache.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import DataSourceError
from .models import CacheResult, CacheState, ValveGraph

log = logging.getLogger(__name__)

Clock = Callable[[], float]


def system_clock_ms() -> float:
    return time.time() * 1000.0


@dataclass(frozen=True)
class CacheEntry:
    graph: ValveGraph
    fetched_at: int


class ValveCache:
    """
    Single-slot TTL cache over a graph loader.

    EMPTY -> FRESH on the first successful load. Once the TTL runs out the
    next get() reloads; if that fails the previous graph is served with
    stale=True, and if there is no previous graph DataSourceError is raised.
    There is no lock: two callers racing past an expired TTL both reload
    and the last one wins the slot.
    """

    def __init__(
        self,
        loader: Callable[[], ValveGraph],
        ttl_ms: int = 10 * 60 * 1000,
        clock: Optional[Clock] = None,
    ) -> None:
        self._loader = loader
        self.ttl_ms = ttl_ms
        self._clock = clock or system_clock_ms
        self._entry: Optional[CacheEntry] = None
        self._last_refresh_failed = False

    @property
    def state(self) -> CacheState:
        if self._entry is None:
            return CacheState.EMPTY
        if self._last_refresh_failed or not self._is_fresh(self._entry):
            return CacheState.STALE
        return CacheState.FRESH

    def _now(self) -> int:
        return int(self._clock())

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._now() - entry.fetched_at < self.ttl_ms

    def get(self) -> CacheResult:
        entry = self._entry
        if entry is not None and self._is_fresh(entry) and not self._last_refresh_failed:
            return _result(entry, stale=False)

        try:
            return self.refresh()
        except Exception as e:
            log.exception("Error fetching valve data")
            if entry is not None:
                log.warning("Returning stale cache due to fetch error")
                return _result(entry, stale=True)
            raise DataSourceError(f"Valve data unavailable: {e}") from e

    def refresh(self) -> CacheResult:
        """Reload now, regardless of age. Load errors propagate unchanged."""
        now = self._now()
        try:
            graph = self._loader()
        except Exception:
            self._last_refresh_failed = True
            raise
        self._entry = CacheEntry(graph=graph, fetched_at=now)
        self._last_refresh_failed = False
        return _result(self._entry, stale=False)

    def invalidate(self) -> None:
        """Drop the cached graph; the next get() must load."""
        self._entry = None
        self._last_refresh_failed = False


def _result(entry: CacheEntry, stale: bool) -> CacheResult:
    return CacheResult(
        data=entry.graph.valves,
        updated_at=entry.fetched_at,
        stale=stale,
        graph=entry.graph,
    )
