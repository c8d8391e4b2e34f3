"""
Utility functions for the application.
"""
from typing import Any, Dict, Iterable, List, Optional
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric value (or None) to Decimal."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    """Round a money amount to cents, half up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def apply_discount(
    subtotal: Decimal,
    discount: Optional[Decimal] = None,
    discount_percent: Optional[Decimal] = None
) -> Decimal:
    """
    Apply a flat discount and a percent discount to a subtotal.
    Both discounts stack; the result never goes below zero.
    """
    subtotal = to_decimal(subtotal)
    total_discount = to_decimal(discount)
    percent = to_decimal(discount_percent)
    if percent > 0:
        total_discount += subtotal * percent / Decimal(100)
    return quantize_money(max(Decimal(0), subtotal - total_discount))


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response


def partial_update(data: Any, nullable: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Fields explicitly sent in an update payload.
    An explicit null is kept only for columns in `nullable`; elsewhere it is ignored.
    """
    nullable = set(nullable)
    return {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in nullable
    }


def allocate_money(total: Decimal, weights: List[Decimal]) -> List[Decimal]:
    """
    Split `total` in proportion to `weights`, in cents, so the parts add up
    to the quantized total exactly. Leftover cents go to the largest
    remainders, earlier positions first on ties.
    """
    total = quantize_money(total)
    weight_sum = sum(weights, Decimal(0))
    if weight_sum <= 0:
        return [quantize_money(Decimal(0)) for _ in weights]
    
    exact = [total * to_decimal(w) / weight_sum for w in weights]
    parts = [e.quantize(CENT, rounding=ROUND_DOWN) for e in exact]
    leftover_cents = int((total - sum(parts, Decimal(0))) / CENT)
    
    by_remainder = sorted(range(len(weights)), key=lambda i: (-(exact[i] - parts[i]), i))
    for i in by_remainder[:leftover_cents]:
        parts[i] += CENT
    return parts
