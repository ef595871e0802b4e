# src/valve_lookup/search.py
"""
Query engine: valve / zone / lot search and shutoff classification.

Both entry points are pure: they take the joined valves and return a new
immutable result, keeping all scratch state local to the call.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Set

from .models import SearchResult, ShutoffReport, ValveRecord
from .utils import (
    contains_text,
    natural_sorted,
    normalize_text,
    normalize_zone,
    unique_in_order,
)


def search(term: str, valves: Sequence[ValveRecord]) -> SearchResult:
    return search_many([term], valves)


def search_many(terms: Iterable[str], valves: Sequence[ValveRecord]) -> SearchResult:
    """
    Two passes over `valves`:

    1. exact matches: valve id, canonical zone, lot number (all
       case-insensitive), plus substring matches on location / location
       notes / function. Only exact matches feed the found zone / lot sets;
       only valve-id and zone matches feed primary_zones.
    2. expansion: every other valve sharing a found zone or lot is added
       as a related valve. primary_zones is left untouched.
    """
    clean_terms = tuple(t for t in (normalize_text(t) for t in terms) if t)
    if not clean_terms:
        return SearchResult(terms=())

    lowered = [t.lower() for t in clean_terms]
    zone_keys = {normalize_zone(t) for t in clean_terms}

    matching: List[ValveRecord] = []
    matched_zones: List[str] = []
    matched_lots: List[str] = []
    primary_zones: List[str] = []
    found_valve_ids: List[str] = []
    found_zones: Set[str] = set()
    found_lots: Set[str] = set()

    # ---- pass 1: exact matches ----
    for valve in valves:
        if valve.valve_id.lower() in lowered:
            found_valve_ids.append(valve.valve_id)
            matching.append(valve)
            found_zones.update(valve.zones)
            found_lots.update(valve.lots)
            primary_zones.extend(valve.zones)

        for zone in valve.zones:
            if normalize_zone(zone) in zone_keys:
                found_zones.add(zone)
                matched_zones.append(zone)
                primary_zones.append(zone)

        for lot in valve.lots:
            if lot.lower() in lowered:
                found_lots.add(lot)
                matched_lots.append(lot)

        if any(
            contains_text(field, term)
            for term in clean_terms
            for field in (valve.location, valve.location_notes, valve.function)
        ):
            matching.append(valve)

    # ---- pass 2: related valves ----
    if found_valve_ids or found_zones or found_lots:
        already = set(found_valve_ids)
        for valve in valves:
            if valve.valve_id in already:
                continue
            if found_zones.intersection(valve.zones) or found_lots.intersection(valve.lots):
                matching.append(valve)

    # keyed collapse: first occurrence wins
    unique: Dict[str, ValveRecord] = {}
    for valve in matching:
        unique.setdefault(valve.valve_id, valve)

    distinct_found = unique_in_order(found_valve_ids)

    return SearchResult(
        terms=clean_terms,
        valves=tuple(unique.values()),
        zones=tuple(unique_in_order(matched_zones)),
        lots=tuple(unique_in_order(matched_lots)),
        primary_zones=tuple(unique_in_order(primary_zones)),
        matched_valve_ids=tuple(distinct_found),
        # zones are fed by 2-3 valves, so one valve alone never closes a zone
        single_valve_lookup=len(distinct_found) == 1,
    )


def classify_shutoff(
    result: SearchResult,
    valves: Sequence[ValveRecord],
    zones_for_lot: Sequence[str] = (),
    lots_for_zone: Sequence[str] = (),
) -> ShutoffReport:
    """
    Which in-scope zones are completely shut off vs only pressure-affected
    if every valve in `result` is closed.

    Scope: the primary zones of the search, else the zones of an explicit
    lot lookup (`zones_for_lot`), else every zone of the result valves.

    A zone is completely shut off when more than one valve is closed and
    every valve serving it (per the whole graph) is among them. A single
    valve lookup never shuts a zone off; such zones are reported affected.

    `lots_for_zone` are the lots of an explicitly looked-up zone; they are
    reported as lots_in_zone and removed from affected_lots.
    """
    if not result.valves:
        return ShutoffReport()

    closed = set(result.valve_ids)

    if result.primary_zones:
        scope = _distinct_zones(result.primary_zones)
    elif zones_for_lot:
        scope = _distinct_zones(zones_for_lot)
    else:
        scope = _distinct_zones(z for v in result.valves for z in v.zones)

    # "Z1" and "Zone 1" on different rows are the same zone
    keys_by_valve = {v.valve_id: {normalize_zone(z) for z in v.zones} for v in valves}
    for v in result.valves:
        keys_by_valve.setdefault(v.valve_id, {normalize_zone(z) for z in v.zones})

    multiple_closed = len(closed) > 1
    shut_off: List[str] = []
    affected: List[str] = []

    for zone in scope:
        key = normalize_zone(zone)
        serving = {v.valve_id for v in valves if key in keys_by_valve[v.valve_id]}
        if not serving:
            continue
        all_closed = serving <= closed
        if all_closed and multiple_closed and not result.single_valve_lookup:
            shut_off.append(zone)
        elif serving & closed:
            affected.append(zone)

    scope_keys = {normalize_zone(z) for z in scope}
    lots_in_scope: Set[str] = set()
    for valve in result.valves:
        if scope_keys & keys_by_valve[valve.valve_id]:
            lots_in_scope.update(valve.lots)

    in_zone = {lot.lower() for lot in lots_for_zone}
    affected_lots = [lot for lot in lots_in_scope if lot.lower() not in in_zone]

    valves_by_zone = {
        zone: tuple(natural_sorted(
            v.valve_id for v in result.valves if normalize_zone(zone) in keys_by_valve[v.valve_id]
        ))
        for zone in scope
    }

    return ShutoffReport(
        zones_in_scope=tuple(scope),
        completely_shut_off=tuple(sorted(shut_off)),
        affected=tuple(sorted(affected)),
        lots_in_zone=tuple(natural_sorted(set(lots_for_zone))),
        affected_lots=tuple(natural_sorted(affected_lots)),
        valves_by_zone=valves_by_zone,
    )


def _distinct_zones(zones: Iterable[str]) -> List[str]:
    """One spelling per canonical zone (first seen), natural order."""
    by_key: Dict[str, str] = {}
    for zone in zones:
        by_key.setdefault(normalize_zone(zone), zone)
    return natural_sorted(by_key.values())
