"""
Order Code Decoder
Normalizes user-entered order codes and decodes self-describing KYS codes
(``KYS-<base64url JSON>``) into a DecodedPayload.

Decoding never raises: every failure returns None together with a reason
code so the caller can decide what to log.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import re
from typing import Any, Dict, Optional, Sequence, Tuple

from . import tracker_config as cfg
from .models import DecodedPayload


# ---------------------------------------------------------------------------
# Alias tables (first key present with a usable value wins)
# ---------------------------------------------------------------------------

PACKAGE_ID_KEYS = ("pid", "packageId", "pkgId", "paket", "package", "pkg", "p")
DURATION_KEYS = ("dur", "durasi", "duration", "minutes", "minute", "min", "d")
DEADLINE_KEYS = ("ddl", "deadline", "days", "day", "hari", "dl")
ORDER_DATE_KEYS = (
    "ts",
    "orderDate",
    "order_date",
    "tanggalOrder",
    "tanggal_order",
    "od",
    "date",
    "tanggal",
)

NUMERIC_FIELDS: Tuple[Tuple[str, Sequence[str]], ...] = (
    ("package_id", PACKAGE_ID_KEYS),
    ("duration", DURATION_KEYS),
    ("deadline", DEADLINE_KEYS),
)
VALUE_FIELDS: Tuple[Tuple[str, Sequence[str]], ...] = (
    ("order_date", ORDER_DATE_KEYS),
)

# Failure reasons
NO_PREFIX = "NO_PREFIX"
EMPTY_PAYLOAD = "EMPTY_PAYLOAD"
BAD_BASE64 = "BAD_BASE64"
BAD_JSON = "BAD_JSON"
NOT_OBJECT = "NOT_OBJECT"
NO_PACKAGE_ID = "NO_PACKAGE_ID"

_WHITESPACE_RE = re.compile(r"\s+")
_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_order_code(value: Any) -> str:
    """Trim and strip whitespace, control and zero-width characters."""
    text = "" if value is None else str(value)
    text = _WHITESPACE_RE.sub("", text.strip())
    text = _ZERO_WIDTH_RE.sub("", text)
    return "".join(ch for ch in text if ch.isprintable())


def is_self_describing(code: Any, prefix: str = cfg.CODE_PREFIX) -> bool:
    return isinstance(code, str) and code.strip().startswith(prefix)


# ---------------------------------------------------------------------------
# Alias resolvers
# ---------------------------------------------------------------------------

def to_number(value: Any) -> Optional[float]:
    """Loose numeric coercion; returns None for anything non-finite.

    Integral results come back as int so package ids compare as "2", not "2.0".
    """
    if value is None:
        number = 0.0
    elif isinstance(value, bool):
        number = 1.0 if value else 0.0
    elif isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            number = 0.0
        elif _NUMBER_RE.match(text):
            number = float(text)
        else:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    if number.is_integer():
        return int(number)
    return number


def first_number(source: Dict[str, Any], keys: Sequence[str]) -> Optional[float]:
    """Return the first alias whose value coerces to a finite number."""
    for key in keys:
        if key in source:
            number = to_number(source[key])
            if number is not None:
                return number
    return None


def first_value(source: Dict[str, Any], keys: Sequence[str]) -> Any:
    """Return the first alias whose value is non-null and non-blank."""
    for key in keys:
        if key in source:
            value = source[key]
            if value is not None and str(value).strip() != "":
                return value
    return None


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_base64_payload(payload: str) -> Optional[str]:
    """Decode URL-safe base64 (padding optional) to text, or None."""
    normalized = payload.replace("-", "+").replace("_", "/")
    padded = normalized + "=" * ((4 - len(normalized) % 4) % 4)
    try:
        return base64.b64decode(padded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def inspect_order_code(
    code: Any,
    prefix: str = cfg.CODE_PREFIX,
) -> Tuple[Optional[DecodedPayload], str]:
    """Decode a KYS code, returning (payload, "") or (None, reason)."""
    if not isinstance(code, str):
        return None, NO_PREFIX
    trimmed = code.strip()
    if not trimmed.startswith(prefix):
        return None, NO_PREFIX

    payload = trimmed[len(prefix):].strip()
    if not payload:
        return None, EMPTY_PAYLOAD

    text = decode_base64_payload(payload)
    if text is None:
        return None, BAD_BASE64

    try:
        parsed = json.loads(text)
    except ValueError:
        return None, BAD_JSON
    if not isinstance(parsed, dict):
        return None, NOT_OBJECT

    values: Dict[str, Any] = {}
    for name, keys in NUMERIC_FIELDS:
        values[name] = first_number(parsed, keys)
    for name, keys in VALUE_FIELDS:
        values[name] = first_value(parsed, keys)

    if values["package_id"] is None:
        return None, NO_PACKAGE_ID

    return (
        DecodedPayload(
            package_id=values["package_id"],
            duration=values["duration"] if values["duration"] is not None else 0,
            deadline=values["deadline"] if values["deadline"] is not None else 0,
            order_date=values["order_date"],
            raw=parsed,
        ),
        "",
    )


def decode_order_code(code: Any, prefix: str = cfg.CODE_PREFIX) -> Optional[DecodedPayload]:
    """Decode a KYS code into a DecodedPayload, or None if it is not one."""
    payload, _reason = inspect_order_code(code, prefix)
    return payload


def encode_order_code(payload: Dict[str, Any], prefix: str = cfg.CODE_PREFIX) -> str:
    """Build a KYS code from a payload dict (URL-safe base64, no padding)."""
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    encoded = base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
    return prefix + encoded.rstrip("=")
