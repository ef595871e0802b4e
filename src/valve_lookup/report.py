# src/valve_lookup/report.py
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import pandas as pd

from .models import SearchResult, ShutoffReport, ValveRecord
from .utils import natural_sort_key

VALVE_COLS = ["Valve", "Location", "Location Notes", "Function", "Zones", "Lots"]
SHUTOFF_COLS = ["Zone", "Status", "Valves"]


def build_valve_table(valves: Sequence[ValveRecord]) -> pd.DataFrame:
    records = [
        {
            "Valve": v.valve_id,
            "Location": v.location,
            "Location Notes": v.location_notes,
            "Function": v.function,
            "Zones": ", ".join(v.zones),
            "Lots": ", ".join(v.lots),
        }
        for v in valves
    ]
    return pd.DataFrame.from_records(records, columns=VALVE_COLS)


def build_shutoff_table(report: ShutoffReport) -> pd.DataFrame:
    """One row per in-scope zone: its status and the result valves serving it."""
    records = [
        {
            "Zone": zone,
            "Status": report.status_of(zone).value,
            "Valves": ", ".join(report.valves_by_zone.get(zone, ())),
        }
        for zone in report.zones_in_scope
    ]
    return pd.DataFrame.from_records(records, columns=SHUTOFF_COLS)


def build_lot_table(report: ShutoffReport) -> pd.DataFrame:
    records = [{"Lot": lot, "Relation": "In zone"} for lot in report.lots_in_zone]
    records += [{"Lot": lot, "Relation": "Affected"} for lot in report.affected_lots]
    return pd.DataFrame.from_records(records, columns=["Lot", "Relation"])


def format_search_summary(result: SearchResult, report: ShutoffReport) -> str:
    terms = ", ".join(result.terms)
    if not result.valves:
        return f'No valves found matching "{terms}"'

    n = len(result.valves)
    lines: List[str] = [f'Found {n} valve{"" if n == 1 else "s"} for "{terms}"']
    if result.zones:
        lines.append(f"Matching zones: {', '.join(sorted(result.zones, key=natural_sort_key))}")
    if result.lots:
        lines.append(f"Matching lots: {', '.join(sorted(result.lots, key=natural_sort_key))}")

    if report.valves_by_zone:
        lines.append("Valves by zone (close all valves listed for a zone to fully shut it off):")
        for zone in report.zones_in_scope:
            lines.append(f"  {zone}: {', '.join(report.valves_by_zone.get(zone, ()))}")

    if report.completely_shut_off:
        lines.append(f"Completely shut off zones: {', '.join(report.completely_shut_off)}")
    if report.affected:
        lines.append(f"Affected zones (pressure only): {', '.join(report.affected)}")
    if report.lots_in_zone:
        lines.append(f"Lots in zone: {', '.join(report.lots_in_zone)}")
    if report.affected_lots:
        lines.append(f"Affected lots: {', '.join(report.affected_lots)}")

    return "\n".join(lines)


def write_search_workbook(output_path: str | Path, result: SearchResult, report: ShutoffReport) -> Path:
    output_path = Path(output_path)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        build_valve_table(result.valves).to_excel(writer, sheet_name="Valves", index=False)
        build_shutoff_table(report).to_excel(writer, sheet_name="Zones", index=False)
        build_lot_table(report).to_excel(writer, sheet_name="Lots", index=False)
    return output_path
