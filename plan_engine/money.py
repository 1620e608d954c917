"""
Money primitives

All monetary values are Decimals quantized to the cent with ROUND_HALF_UP.
Splitting work happens in integer cents so no value ever passes through a
binary float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using ROUND_HALF_UP."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal) -> int:
    return int(quantize_money(value) * 100)


def from_cents(cents: int) -> Decimal:
    return quantize_money(Decimal(cents) / 100)


def parse_money(value, field: str = "amount", allow_negative: bool = False) -> Decimal:
    """
    Parse an API value (int, float, str or Decimal) into a quantized Decimal.

    Floats go through str() first so 0.1 becomes Decimal('0.1'), not the
    binary approximation.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(f"expected a number, got: {value!r}", field=field)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"not a valid amount: {value!r}", field=field) from None
    if not amount.is_finite():
        raise InvalidAmountError(f"not a valid amount: {value!r}", field=field)
    if amount < 0 and not allow_negative:
        raise InvalidAmountError(f"cannot be negative, got: {amount}", field=field)
    try:
        return quantize_money(amount)
    except InvalidOperation:
        raise InvalidAmountError(f"amount too large: {value!r}", field=field) from None


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return round(float(value), 2)


def fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"${value:,.2f}"
