from decimal import (
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    ROUND_HALF_EVEN,
    Rounded,
)
from typing import Union

# All balances carry exactly four fractional digits.
FOUR_PLACES = Decimal("0.0001")
ZERO = Decimal("0.0000")

# Balance arithmetic raises instead of rounding. The precision leaves room for
# sums of many amounts that individually fit the default 28-digit context.
LEDGER_CONTEXT = Context(
    prec=64,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact, Rounded],
)


def to_amount(value: Union[str, int, Decimal]) -> Decimal:
    """
    Convert a value to a four-place amount.

    Raises ValueError if the value is not a finite number or carries more
    precision than four decimal places.
    """
    try:
        amount = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except InvalidOperation:
        raise ValueError(f"not a decimal number: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"not a finite amount: {value!r}")

    try:
        quantized = amount.quantize(FOUR_PLACES)
    except InvalidOperation:
        raise ValueError(f"amount out of range: {value!r}")

    if quantized != amount:
        raise ValueError(f"more than four decimal places: {value!r}")

    # Drop the sign of negative zero so it renders as 0.0000
    if quantized.is_zero():
        return ZERO
    return quantized


def add(a: Decimal, b: Decimal) -> Decimal:
    return LEDGER_CONTEXT.add(a, b)


def subtract(a: Decimal, b: Decimal) -> Decimal:
    return LEDGER_CONTEXT.subtract(a, b)


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly four digits after the decimal point."""
    quantized = value.quantize(FOUR_PLACES)
    if quantized.is_zero():
        quantized = ZERO
    return f"{quantized:f}"
