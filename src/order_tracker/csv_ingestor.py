"""
CSV Ingestor
Tokenizes the published order sheet (quoted cells may contain commas,
newlines and doubled quotes) and maps its header row to semantic columns.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from . import tracker_config as cfg
from .models import ColumnMap

Row = List[str]


def parse_csv(text: str) -> List[Row]:
    """Split CSV text into trimmed rows, dropping blank rows.

    Unquoted CR, LF or CRLF ends a row; a final row without a trailing
    newline is still emitted.
    """
    rows: List[Row] = []
    current: Row = []
    value: List[str] = []
    inside_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if char == '"':
            if inside_quotes and i + 1 < length and text[i + 1] == '"':
                value.append('"')
                i += 1
            else:
                inside_quotes = not inside_quotes
        elif char == "," and not inside_quotes:
            current.append("".join(value))
            value = []
        elif char in "\r\n" and not inside_quotes:
            if char == "\r" and i + 1 < length and text[i + 1] == "\n":
                i += 1
            current.append("".join(value))
            rows.append(current)
            current = []
            value = []
        else:
            value.append(char)
        i += 1

    if value or current:
        current.append("".join(value))
        rows.append(current)

    return [
        [cell.strip() for cell in row]
        for row in rows
        if row and any(cell.strip() for cell in row)
    ]


def map_columns(header_row: Optional[Sequence[str]]) -> ColumnMap:
    """Locate each semantic column by exact, case-insensitive header name."""
    normalized = [str(cell or "").strip().lower() for cell in (header_row or [])]
    indexes: Dict[str, int] = {}
    for key, spellings in cfg.COLUMN_HEADERS.items():
        indexes[key] = -1
        for spelling in spellings:
            if spelling in normalized:
                indexes[key] = normalized.index(spelling)
                break
    return ColumnMap(indexes=indexes)


def get_column_index(
    columns: Optional[ColumnMap],
    key: str,
    defaults: Optional[Dict[str, int]] = None,
) -> int:
    mapped = columns.mapped(key) if columns is not None else -1
    if mapped >= 0:
        return mapped
    return (defaults or cfg.DEFAULT_COLUMN_INDEXES).get(key, -1)


def get_cell_value(
    columns: Optional[ColumnMap],
    row: Sequence[str],
    key: str,
    defaults: Optional[Dict[str, int]] = None,
) -> str:
    """Return the trimmed cell for ``key``, or "" when out of range."""
    idx = get_column_index(columns, key, defaults)
    if idx < 0 or idx >= len(row):
        return ""
    return str(row[idx] if row[idx] is not None else "").strip()
