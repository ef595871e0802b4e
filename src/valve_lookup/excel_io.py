# src/valve_lookup/excel_io.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from .utils import normalize_text

log = logging.getLogger(__name__)


def find_sheet_name(xlsx_path: Path, sheet_name: str) -> str:
    """Resolve `sheet_name` against the workbook, ignoring case."""
    xl = pd.ExcelFile(xlsx_path, engine="openpyxl")
    wanted = sheet_name.strip().lower()
    for name in xl.sheet_names:
        if name.strip().lower() == wanted:
            return name
    raise ValueError(
        f"Sheet '{sheet_name}' not found in {xlsx_path.name}. "
        f"Available: {xl.sheet_names}"
    )


def load_sheet_values(xlsx_path: str | Path, sheet_name: str) -> List[List[str]]:
    """
    Read one sheet as a 2D list of strings, header row first.
    Empty cells become "", integral numbers lose their ".0".
    """
    xlsx_path = Path(xlsx_path)
    if not xlsx_path.exists():
        raise FileNotFoundError(f"Workbook not found: {xlsx_path}")

    resolved = find_sheet_name(xlsx_path, sheet_name)
    raw = pd.read_excel(xlsx_path, sheet_name=resolved, header=None, dtype=object, engine="openpyxl")

    values = [[normalize_text(x) for x in row] for row in raw.itertuples(index=False, name=None)]

    # trailing blank rows come back when cells were formatted but left empty
    while values and not any(values[-1]):
        values.pop()

    log.info("Loaded sheet %r from %s (%d rows)", resolved, xlsx_path.name, len(values))
    return values


class ExcelTableSource:
    """Tabular source backed by a local .xlsx workbook."""

    def __init__(self, xlsx_path: str | Path) -> None:
        self.xlsx_path = Path(xlsx_path).expanduser()

    def fetch_table(self, name: str) -> List[List[str]]:
        return load_sheet_values(self.xlsx_path, name)

    __call__ = fetch_table

    def __repr__(self) -> str:
        return f"ExcelTableSource({str(self.xlsx_path)!r})"
