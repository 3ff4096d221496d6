"""
Package Pricing Calculation
Base fee (with promo), overtime beyond the free minutes, deadline surcharge
tier and buffer fee for one package.

Any callable with the signature of ``calc_total`` can be handed to the
price engine instead, for pricing services with their own rules.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, List, Optional

from . import tracker_config as cfg
from .models import PriceBreakdown
from .pricing_config import DeadlineTier, PricingDocument, PricingPackage, PromoDocument

CalcTotal = Callable[
    [PricingPackage, PricingDocument, PromoDocument, float, float],
    PriceBreakdown,
]


def safe_decimal(value: Any) -> Decimal:
    """Convert a number or numeric string to Decimal, returning 0 on failure."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        cleaned = str(value).replace(",", "").strip()
        result = Decimal(cleaned) if cleaned else Decimal("0")
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def round_amount(value: Decimal) -> int:
    """Round to a whole currency unit, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _first_set(*values: Optional[float]) -> Optional[float]:
    for value in values:
        if value is not None:
            return value
    return None


def select_deadline_tier(
    deadline: Decimal,
    tiers: List[DeadlineTier],
) -> Optional[DeadlineTier]:
    """Smallest tier whose ``days`` bound still covers the deadline."""
    if deadline <= 0:
        return None
    candidates = [t for t in tiers if deadline <= safe_decimal(t.days)]
    if not candidates:
        return None
    return min(candidates, key=lambda t: safe_decimal(t.days))


def calc_base(pkg: PricingPackage, promo: PromoDocument) -> int:
    base = safe_decimal(pkg.price)
    if promo.applies_to(pkg.id):
        percent = safe_decimal(promo.percent)
        amount = safe_decimal(promo.amount)
        if percent > 0:
            base = base - base * percent / 100
        elif amount > 0:
            base = base - amount
    return max(0, round_amount(base))


def calc_total(
    pkg: PricingPackage,
    prices: PricingDocument,
    promo: PromoDocument,
    duration: float,
    deadline: float,
) -> PriceBreakdown:
    """Compute the fee components for a package, duration and deadline."""
    base_final = calc_base(pkg, promo)

    free_minutes = safe_decimal(
        _first_set(pkg.free_minutes, prices.free_minutes, cfg.DEFAULT_FREE_MINUTES)
    )
    over_min = max(Decimal("0"), safe_decimal(duration) - free_minutes)
    over_rate = round_amount(safe_decimal(_first_set(pkg.overtime_rate, prices.overtime_rate)))
    over_cost = round_amount(over_min * over_rate)

    tiers = pkg.deadline_tiers if pkg.deadline_tiers else prices.deadline_tiers
    tier = select_deadline_tier(safe_decimal(deadline), tiers)
    if tier is None:
        surcharge_val = 0
    elif tier.amount is not None:
        surcharge_val = round_amount(safe_decimal(tier.amount))
    else:
        surcharge_val = round_amount(Decimal(base_final) * safe_decimal(tier.percent) / 100)

    buf_val = round_amount(safe_decimal(_first_set(pkg.buffer_fee, prices.buffer_fee)))

    over_min_value = int(over_min) if over_min == over_min.to_integral_value() else float(over_min)
    return PriceBreakdown(
        base_final=base_final,
        over_min=over_min_value,
        over_rate=over_rate,
        over_cost=over_cost,
        surcharge_val=surcharge_val,
        buf_val=buf_val,
    )
