"""
Price Computation Engine
Combines the package pricing calculation with the order's revision count
into an itemized invoice.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from .models import DecodedPayload, Invoice, RevisionFee
from .pricing_calculation import CalcTotal, calc_total, round_amount, safe_decimal
from .pricing_config import PricingDocument, PricingPackage, PromoDocument

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class PackageNotFoundError(LookupError):
    """Decoded package id has no entry in the current pricing document."""

    def __init__(self, package_id: Any):
        super().__init__(f"package not found: {package_id}")
        self.package_id = package_id


def parse_revision_count(value: Any) -> int:
    """Leading integer of a sheet cell ("3x" -> 3); 0 when there is none."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT_RE.match(str(value if value is not None else ""))
    if not match:
        return 0
    return int(match.group(1))


def compute_revision_fee(revision_count: Any, pkg: PricingPackage, subtotal: Any) -> RevisionFee:
    """Charge ``percent`` of the subtotal for every revision past the included quota."""
    used = parse_revision_count(revision_count)
    included = pkg.included
    extra_count = max(0, used - included)
    percent = safe_decimal(pkg.extra_revision_percent)
    base_amount = safe_decimal(subtotal)

    fee = 0
    if extra_count > 0 and percent > 0:
        fee = round_amount(base_amount * (percent / 100) * extra_count)

    return RevisionFee(
        used=used,
        included=included,
        extra_count=extra_count,
        percent=float(percent),
        fee=fee,
    )


def compute_invoice(
    pkg: PricingPackage,
    prices: PricingDocument,
    promo: PromoDocument,
    duration_minutes: float,
    deadline_days: float,
    revision_count: Any,
    calc: Optional[CalcTotal] = None,
) -> Invoice:
    """Build the invoice for a resolved package."""
    breakdown = (calc or calc_total)(pkg, prices, promo, duration_minutes, deadline_days)
    subtotal = breakdown.subtotal
    revision = compute_revision_fee(revision_count, pkg, subtotal)
    return Invoice(
        package_id=pkg.id,
        package_name=pkg.name or "-",
        duration=duration_minutes,
        deadline=deadline_days,
        breakdown=breakdown,
        subtotal=subtotal,
        revision=revision,
        total=subtotal + revision.fee,
    )


def price_decoded_order(
    decoded: DecodedPayload,
    prices: PricingDocument,
    promo: PromoDocument,
    revision_count: Any,
    calc: Optional[CalcTotal] = None,
) -> Invoice:
    """Resolve the decoded package and price it.

    Raises PackageNotFoundError instead of guessing a default price.
    """
    pkg = prices.find_package(decoded.package_id)
    if pkg is None:
        raise PackageNotFoundError(decoded.package_id)
    return compute_invoice(
        pkg,
        prices,
        promo,
        decoded.duration or 0,
        decoded.deadline or 0,
        revision_count,
        calc=calc,
    )


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_percent(value: Any) -> str:
    """At most two decimals, trailing zeros stripped ("12.50" -> "12.5")."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(number):
        return "0"
    text = f"{number:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_idr(value: Any) -> str:
    """Rupiah with dot thousands separators, e.g. ``Rp 1.250.000``."""
    amount = round_amount(safe_decimal(value))
    sign = "-" if amount < 0 else ""
    return f"{sign}Rp {abs(amount):,}".replace(",", ".")


def format_minutes(value: Any) -> str:
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return "-"
    if not math.isfinite(minutes):
        return "-"
    shown = int(minutes) if minutes.is_integer() else minutes
    return f"{shown} menit"
