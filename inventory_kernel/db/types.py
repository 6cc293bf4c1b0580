"""
Module: inventory_kernel.db.types
Responsibility: Money parsing and rounding for values headed into
    Numeric(14, 2) columns.
Architecture position: Kernel > DB.  Used by services; imports nothing
    from the kernel.

Prices are stored to the cent, rounded half-up.  Order totals are sums of
stored prices times integer quantities, so they need no further rounding.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def money_from_str(value: str) -> Decimal:
    """Parse a finite decimal amount; ValueError otherwise."""
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return amount


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
