# src/valve_lookup/rows.py
from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd

from .config import LookupConfig
from .errors import EmptySourceError, SchemaError
from .utils import normalize_text

Table = Sequence[Sequence[object]]


def table_headers(values: Table) -> List[str]:
    if not values:
        return []
    return [normalize_text(h) for h in values[0]]


def to_records(values: Table) -> List[Dict[str, str]]:
    """
    Convert a 2D table (header row first) into one dict per data row.
    Values are trimmed; cells missing from a short row become "".
    """
    headers = table_headers(values)
    records: List[Dict[str, str]] = []
    for row in values[1:]:
        rec: Dict[str, str] = {}
        for idx, header in enumerate(headers):
            rec[header] = normalize_text(row[idx]) if idx < len(row) else ""
        records.append(rec)
    return records


def to_frame(values: Table) -> pd.DataFrame:
    """Same as to_records, as a DataFrame with one column per distinct header."""
    headers = list(dict.fromkeys(table_headers(values)))
    return pd.DataFrame.from_records(to_records(values), columns=headers)


def require_columns(values: Table, required: Sequence[str], table_name: str) -> None:
    headers = set(table_headers(values))
    for col in required:
        if col not in headers:
            raise SchemaError(f'{table_name} must have a "{col}" column')


def normalize_valve_table(values: Table, cfg: LookupConfig) -> pd.DataFrame:
    if not values:
        raise EmptySourceError(f"{cfg.valve_sheet_name} is empty")
    require_columns(values, cfg.required_valve_columns, cfg.valve_sheet_name)
    if len(values) < 2:
        raise EmptySourceError(f"{cfg.valve_sheet_name} has no data rows")

    df = to_frame(values)
    # optional columns default to empty text
    for col in (cfg.location_col, cfg.location_notes_col, cfg.function_col):
        if col not in df.columns:
            df[col] = ""
    return df


def normalize_zone_table(values: Table, cfg: LookupConfig) -> pd.DataFrame:
    require_columns(values, cfg.required_zone_columns, cfg.zone_sheet_name)
    return to_frame(values)
