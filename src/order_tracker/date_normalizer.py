"""
Date Normalizer
Parses and formats the date shapes found in sheet cells and decoded KYS
payloads.

Each consumer has its own ordered chain of strategies (pure
``str -> Optional[datetime]`` functions). The chains are not
shared: the finish-date column only ever accepts strict D/M/YYYY, while the
order-date column and decoded payloads are parsed leniently.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from . import tracker_config as cfg

DateStrategy = Callable[[str], Optional[datetime]]

_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_DMY_PREFIX_RE = re.compile(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})")
_STRICT_DMY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_NON_DIGIT_RE = re.compile(r"[^\d]")

# Tried in order after ISO-8601 by the generic parser
GENERIC_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%a, %d %b %Y %H:%M:%S GMT",
    "%a %b %d %Y",
)


def _utc_date(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def parse_iso_prefix(raw: str) -> Optional[datetime]:
    """``YYYY-M-D`` at the start of the cell, as a UTC calendar date."""
    match = _ISO_PREFIX_RE.match(raw)
    if not match:
        return None
    return _utc_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def parse_dmy_prefix(raw: str) -> Optional[datetime]:
    """``D/M/Y``, ``D.M.Y`` or ``D-M-Y`` at the start of the cell."""
    match = _DMY_PREFIX_RE.match(raw)
    if not match:
        return None
    return _utc_date(int(match.group(3)), int(match.group(2)), int(match.group(1)))


def parse_generic(raw: str) -> Optional[datetime]:
    """ISO-8601 timestamps, then a few common spelled-out formats."""
    text = raw.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is None:
        for fmt in GENERIC_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_strict_dmy(raw: str) -> Optional[datetime]:
    """Anchored ``D/M/YYYY`` that must round-trip to the same calendar date."""
    match = _STRICT_DMY_RE.match(raw)
    if not match:
        return None
    day, month, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
    if day < 1 or day > 31 or month < 1 or month > 12 or year < 1000:
        return None
    date = _utc_date(year, month, day)
    if date is None or (date.year, date.month, date.day) != (year, month, day):
        return None
    return date


SHEET_DATE_STRATEGIES: Sequence[DateStrategy] = (
    parse_iso_prefix,
    parse_dmy_prefix,
    parse_generic,
)
FINISH_DATE_STRATEGIES: Sequence[DateStrategy] = (parse_strict_dmy,)


def run_strategies(value: Any, strategies: Sequence[DateStrategy]) -> Optional[datetime]:
    raw = str(value if value is not None else "").strip()
    if not raw:
        return None
    for strategy in strategies:
        parsed = strategy(raw)
        if parsed is not None:
            return parsed
    return None


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

def parse_sheet_date(value: Any) -> Optional[datetime]:
    return run_strategies(value, SHEET_DATE_STRATEGIES)


def parse_ddmmyyyy(value: Any) -> Optional[datetime]:
    return run_strategies(value, FINISH_DATE_STRATEGIES)


DECODED_DATE_STRATEGIES: Sequence[DateStrategy] = (parse_sheet_date, parse_generic)


def parse_decoded_order_date(value: Any) -> Optional[datetime]:
    """Parse a decoded payload date.

    Numbers are Unix seconds when below 1e12, otherwise milliseconds.
    Strings go through the sheet-cell chain, then the generic parser.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        millis = value * 1000 if value < 1e12 else value
        try:
            return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass
    return run_strategies(value, DECODED_DATE_STRATEGIES)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

def format_ddmmyyyy(date: datetime) -> str:
    return f"{date.day:02d}/{date.month:02d}/{date.year}"


def format_ui_date(date: datetime, time_zone: Optional[str] = None) -> str:
    """Indonesian-style ``DD/MM/YYYY``, optionally in a given time zone."""
    if time_zone:
        date = date.astimezone(ZoneInfo(time_zone))
    return format_ddmmyyyy(date)


def format_tracker_date(value: Any) -> str:
    """Format the 'Tanggal Order' cell for display.

    Priority: strict D/M/YYYY, compact timestamp (12+ digits, YYYYMMDDHHmm[ss]),
    compact date (8 digits, YYYYMMDD), any sheet-cell date; otherwise the
    trimmed input is returned unchanged.
    """
    raw = str(value if value is not None else "").strip()
    if not raw:
        return "-"

    strict = parse_ddmmyyyy(raw)
    if strict is not None:
        return format_ddmmyyyy(strict)

    digits = _NON_DIGIT_RE.sub("", raw)
    if len(digits) >= 12:
        year, month, day = digits[0:4], digits[4:6], digits[6:8]
        hour, minute = digits[8:10], digits[10:12]
        second = digits[12:14] if len(digits) >= 14 else "00"
        return f"{day}/{month}/{year} {hour}:{minute}:{second}"
    if len(digits) == 8:
        return f"{digits[6:8]}/{digits[4:6]}/{digits[0:4]}"

    parsed = parse_sheet_date(raw)
    if parsed is not None:
        return format_ui_date(parsed)
    return raw


def format_finish_date(value: Any) -> str:
    parsed = parse_ddmmyyyy(value)
    if parsed is None:
        return "-"
    return format_ddmmyyyy(parsed)


def date_key(date: datetime, time_zone: str = cfg.TIME_ZONE) -> str:
    """Calendar date (YYYY-MM-DD) of an instant in the given time zone."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return date.astimezone(ZoneInfo(time_zone)).date().isoformat()
