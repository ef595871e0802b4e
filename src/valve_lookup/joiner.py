# src/valve_lookup/joiner.py
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Set

from .config import LookupConfig
from .errors import EmptySourceError, JoinError
from .models import ValveGraph, ValveRecord, ZoneMappingRow
from .rows import Table, normalize_valve_table, normalize_zone_table

log = logging.getLogger(__name__)

FetchTable = Callable[[str], Table]


def join_valve_data(
    valve_values: Table,
    zone_values: Table,
    cfg: Optional[LookupConfig] = None,
) -> ValveGraph:
    """
    Join Valve Sheet rows with Zone Sheet rows on the valve id.

    - every distinct valve id in the Valve Sheet yields exactly one ValveRecord,
      in sheet order, even when no Zone Sheet row mentions it
    - Zone Sheet rows naming a valve that is not in the Valve Sheet are
      orphans: counted, logged and left out of the graph
    - zones / lots are stored sorted and de-duplicated
    """
    cfg = cfg or LookupConfig()

    valve_df = normalize_valve_table(valve_values, cfg)
    zone_df = normalize_zone_table(zone_values, cfg)

    valve_df = valve_df[valve_df[cfg.valve_col] != ""]
    valve_df = valve_df.drop_duplicates(subset=[cfg.valve_col], keep="first")
    if valve_df.empty:
        raise EmptySourceError(f"{cfg.valve_sheet_name} has no rows with a valve id")

    zone_df = zone_df[zone_df[cfg.valve_col] != ""]
    known = zone_df[cfg.valve_col].isin(set(valve_df[cfg.valve_col]))
    orphan_count = int((~known).sum())
    linked = zone_df[known]

    if orphan_count > 0:
        log.warning(
            "Found %d %s rows referencing valves not in %s",
            orphan_count, cfg.zone_sheet_name, cfg.valve_sheet_name,
        )

    zones_by_valve: Dict[str, Set[str]] = {}
    lots_by_valve: Dict[str, Set[str]] = {}
    zone_rows: List[ZoneMappingRow] = []

    cols = [cfg.valve_col, cfg.zone_col, cfg.lot_col]
    for valve_id, zone, lot in linked[cols].itertuples(index=False, name=None):
        zones = zones_by_valve.setdefault(valve_id, set())
        lots = lots_by_valve.setdefault(valve_id, set())
        if zone:
            zones.add(zone)
        if lot:
            lots.add(lot)
        zone_rows.append(ZoneMappingRow(valve_id=valve_id, zone=zone, lot=lot))

    valves = tuple(
        _to_valve_record(row, zones_by_valve, lots_by_valve, cfg)
        for row in valve_df.to_dict(orient="records")
    )

    log.info(
        "Joined %d valves with %d zone rows (%d orphaned)",
        len(valves), len(zone_rows), orphan_count,
    )
    return ValveGraph(valves=valves, zone_rows=tuple(zone_rows), orphan_count=orphan_count)


def _to_valve_record(
    row: dict,
    zones_by_valve: Dict[str, Set[str]],
    lots_by_valve: Dict[str, Set[str]],
    cfg: LookupConfig,
) -> ValveRecord:
    valve_id = row[cfg.valve_col]
    return ValveRecord(
        valve_id=valve_id,
        location=row.get(cfg.location_col, ""),
        location_notes=row.get(cfg.location_notes_col, ""),
        function=row.get(cfg.function_col, ""),
        # plain lexicographic order; natural order is applied when presenting
        zones=tuple(sorted(zones_by_valve.get(valve_id, ()))),
        lots=tuple(sorted(lots_by_valve.get(valve_id, ()))),
    )


def load_valve_graph(fetch_table: FetchTable, cfg: Optional[LookupConfig] = None) -> ValveGraph:
    """Fetch both sheets through `fetch_table` and join them."""
    cfg = cfg or LookupConfig()

    try:
        valve_values = fetch_table(cfg.valve_sheet_name)
        zone_values = fetch_table(cfg.zone_sheet_name)
    except Exception as e:
        raise JoinError(f"Failed to fetch valve data: {e}") from e

    return join_valve_data(valve_values, zone_values, cfg)
