# src/valve_lookup/utils.py
from __future__ import annotations

import re
from typing import Any, Iterable, List, Tuple

# "Zone 1", "zone 1", "zone1", "Z1", "z 1", "Zone-1", "Zone #1", "1"  ->  "z1"
_ZONE_RE = re.compile(r"(?:zone|z)?\s*[-#]?\s*(\d+)")
_DIGITS_RE = re.compile(r"\d+")


def normalize_text(value: object) -> str:
    """
    Normalize a raw sheet cell: None -> "", non-breaking spaces and
    line breaks -> space, trimmed.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            value = int(value)
    s = str(value)
    s = s.replace("\u00A0", " ").replace("\r", " ").replace("\n", " ").replace("\t", " ")
    return s.strip()


def normalize_zone(value: Any) -> str:
    """
    Canonical zone key.

    Grammar (after lower-casing and trimming):
        [ "zone" | "z" ] [ws] [ "-" | "#" ] [ws] <digits>   ->  "z<digits>"
        anything else                            ->  the lower-cased string

    The digit run must make up the rest of the string, so "Zone 10" -> "z10"
    never collides with "Zone 1" -> "z1", and a valve id such as "V1" is
    not read as a zone.
    """
    s = normalize_text(value).lower()
    m = _ZONE_RE.fullmatch(s)
    if m:
        return f"z{m.group(1)}"
    return s


def same_zone(a: Any, b: Any) -> bool:
    return normalize_zone(a) == normalize_zone(b)


def same_id(a: Any, b: Any) -> bool:
    """Exact, case-insensitive match for valve ids and lot numbers."""
    return normalize_text(a).lower() == normalize_text(b).lower()


def contains_text(haystack: Any, needle: Any) -> bool:
    """Case-insensitive substring match for free-text fields."""
    n = normalize_text(needle).lower()
    if not n:
        return False
    return n in normalize_text(haystack).lower()


def natural_sort_key(value: str) -> Tuple[int, str, str]:
    # first digit run numerically, then text: Z2 < Z10, 99 < 101
    s = normalize_text(value)
    m = _DIGITS_RE.search(s)
    return (int(m.group(0)) if m else 0, s.lower(), s)


def natural_sorted(values: Iterable[str]) -> List[str]:
    return sorted(values, key=natural_sort_key)


def unique_in_order(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
