# src/valve_lookup/service.py
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .cache import Clock, ValveCache
from .config import LookupConfig
from .excel_io import ExcelTableSource
from .joiner import FetchTable, load_valve_graph
from .models import CacheResult, SearchResult, ShutoffReport, ValveGraph, ValveRecord
from .search import classify_shutoff, search_many
from .utils import normalize_zone, same_id


def zones_for_lot(graph: ValveGraph, lot: str) -> List[str]:
    """Zones the lot belongs to, per the Zone Sheet rows."""
    zones = {
        row.zone
        for row in graph.zone_rows
        if row.lot and row.zone and same_id(row.lot, lot)
    }
    return sorted(zones)


def lots_for_zone(graph: ValveGraph, zone: str) -> List[str]:
    """Lots in the zone ("Zone 1", "z1" and "Z1" name the same zone)."""
    key = normalize_zone(zone)
    lots = {
        row.lot
        for row in graph.zone_rows
        if row.lot and row.zone and normalize_zone(row.zone) == key
    }
    return sorted(lots)


class ValveLookupService:
    """
    Plain-data entry points over the cached valve graph.
    Every call goes through the cache, so a call after the TTL reloads.
    """

    def __init__(
        self,
        fetch_table: FetchTable,
        cfg: Optional[LookupConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.cfg = cfg or LookupConfig()
        self.cache = ValveCache(
            loader=lambda: load_valve_graph(fetch_table, self.cfg),
            ttl_ms=self.cfg.cache_ttl_ms,
            clock=clock,
        )

    @classmethod
    def from_workbook(cls, cfg: Optional[LookupConfig] = None) -> "ValveLookupService":
        cfg = cfg or LookupConfig()
        return cls(ExcelTableSource(cfg.workbook_path), cfg)

    def _graph(self) -> ValveGraph:
        return self.cache.get().graph

    def get_all_valves(self) -> CacheResult:
        return self.cache.get()

    def get_valve_by_id(self, valve_id: str) -> Optional[ValveRecord]:
        for valve in self._graph().valves:
            if same_id(valve.valve_id, valve_id):
                return valve
        return None

    def get_zones_for_lot(self, lot: str) -> List[str]:
        return zones_for_lot(self._graph(), lot)

    def get_lots_for_zone(self, zone: str) -> List[str]:
        return lots_for_zone(self._graph(), zone)

    def search(self, term: str) -> SearchResult:
        return self.search_many([term])

    def search_many(self, terms: Iterable[str]) -> SearchResult:
        return search_many(terms, self._graph().valves)

    def shutoff_report(self, terms: Iterable[str]) -> Tuple[SearchResult, ShutoffReport]:
        """
        Search, then classify with the explicit lot -> zone and
        zone -> lot lookups for whatever the terms matched.
        """
        graph = self._graph()
        result = search_many(terms, graph.valves)

        lot_zones: List[str] = []
        for lot in result.lots:
            lot_zones.extend(zones_for_lot(graph, lot))

        zone_lots: List[str] = []
        for zone in result.zones:
            zone_lots.extend(lots_for_zone(graph, zone))

        report = classify_shutoff(
            result,
            graph.valves,
            zones_for_lot=sorted(set(lot_zones)),
            lots_for_zone=sorted(set(zone_lots)),
        )
        return result, report
