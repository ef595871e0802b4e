from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ZoneStatus(str, Enum):
    SHUT_OFF = "Completely shut off"
    AFFECTED = "Affected"
    UNAFFECTED = "Not affected"


class CacheState(str, Enum):
    EMPTY = "Empty"
    FRESH = "Fresh"
    STALE = "Stale"


@dataclass(frozen=True)
class ValveRecord:
    valve_id: str
    location: str = ""
    location_notes: str = ""
    function: str = ""

    # sorted, unique, no empty strings
    zones: Tuple[str, ...] = ()
    lots: Tuple[str, ...] = ()

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["zones"] = list(self.zones)
        rec["lots"] = list(self.lots)
        return rec


@dataclass(frozen=True)
class ZoneMappingRow:
    valve_id: str
    zone: str
    lot: str


@dataclass(frozen=True)
class ValveGraph:
    """One refresh worth of joined data."""
    valves: Tuple[ValveRecord, ...]
    zone_rows: Tuple[ZoneMappingRow, ...] = ()
    orphan_count: int = 0


@dataclass(frozen=True)
class SearchResult:
    terms: Tuple[str, ...]
    valves: Tuple[ValveRecord, ...] = ()
    zones: Tuple[str, ...] = ()           # zones matched by the terms themselves
    lots: Tuple[str, ...] = ()            # lots matched by the terms themselves
    primary_zones: Tuple[str, ...] = ()   # zones the matched entity directly serves
    matched_valve_ids: Tuple[str, ...] = ()
    single_valve_lookup: bool = False

    @property
    def valve_ids(self) -> Tuple[str, ...]:
        return tuple(v.valve_id for v in self.valves)

    @property
    def is_empty(self) -> bool:
        return not self.valves and not self.zones and not self.lots

    def to_record(self) -> dict:
        return {
            "terms": list(self.terms),
            "valves": [v.to_record() for v in self.valves],
            "zones": list(self.zones),
            "lots": list(self.lots),
            "primary_zones": list(self.primary_zones),
            "matched_valve_ids": list(self.matched_valve_ids),
            "single_valve_lookup": self.single_valve_lookup,
        }


@dataclass(frozen=True)
class ShutoffReport:
    zones_in_scope: Tuple[str, ...] = ()
    completely_shut_off: Tuple[str, ...] = ()
    affected: Tuple[str, ...] = ()
    lots_in_zone: Tuple[str, ...] = ()
    affected_lots: Tuple[str, ...] = ()
    valves_by_zone: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def status_of(self, zone: str) -> ZoneStatus:
        if zone in self.completely_shut_off:
            return ZoneStatus.SHUT_OFF
        if zone in self.affected:
            return ZoneStatus.AFFECTED
        return ZoneStatus.UNAFFECTED

    def to_record(self) -> dict:
        return {
            "zones_in_scope": list(self.zones_in_scope),
            "completely_shut_off": list(self.completely_shut_off),
            "affected": list(self.affected),
            "lots_in_zone": list(self.lots_in_zone),
            "affected_lots": list(self.affected_lots),
            "valves_by_zone": {z: list(v) for z, v in self.valves_by_zone.items()},
        }


@dataclass(frozen=True)
class CacheResult:
    data: Tuple[ValveRecord, ...]
    updated_at: int          # epoch ms of the fetch that produced `data`
    stale: bool
    graph: Optional[ValveGraph] = None

    def to_record(self) -> dict:
        valves: List[dict] = [v.to_record() for v in self.data]
        return {
            "updated_at": self.updated_at,
            "stale": self.stale,
            "count": len(valves),
            "valves": valves,
        }
