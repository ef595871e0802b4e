# src/valve_lookup/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_WORKBOOK = PROJECT_ROOT / "data" / "Master Zone & Valve Database.xlsx"


@dataclass
class LookupConfig:
    valve_sheet_name: str = "Valve Sheet"
    zone_sheet_name: str = "Zone Sheet"

    # Valve Sheet columns
    valve_col: str = "Valve"
    location_col: str = "Location"
    location_notes_col: str = "Location Notes"
    function_col: str = "Function"

    # Zone Sheet columns (one row per valve/zone/lot association)
    zone_col: str = "Zone"
    lot_col: str = "Lot #"

    cache_ttl_ms: int = 10 * 60 * 1000

    workbook_path: Path = field(default_factory=lambda: DEFAULT_WORKBOOK)

    @property
    def required_valve_columns(self) -> tuple[str, ...]:
        return (self.valve_col,)

    @property
    def required_zone_columns(self) -> tuple[str, ...]:
        return (self.valve_col, self.zone_col, self.lot_col)


def build_config_from_env() -> LookupConfig:
    """Build LookupConfig from environment variables."""
    cfg = LookupConfig()

    workbook = os.getenv("VALVE_WORKBOOK_PATH", "").strip()
    if workbook:
        cfg.workbook_path = Path(workbook).expanduser()

    ttl = os.getenv("VALVE_CACHE_TTL_MS", "").strip()
    if ttl:
        try:
            cfg.cache_ttl_ms = int(ttl)
        except ValueError:
            raise ValueError(f"Invalid VALVE_CACHE_TTL_MS: {ttl!r} (expected milliseconds)") from None
        if cfg.cache_ttl_ms < 0:
            raise ValueError(f"Invalid VALVE_CACHE_TTL_MS: {ttl!r} (must be >= 0)")

    return cfg
