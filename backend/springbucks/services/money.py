"""Exact price handling in minor units (no floating point)."""

from decimal import Decimal, InvalidOperation

from springbucks.config import CURRENCY

MINOR_DIGITS = 2
MAX_PRICE_MINOR = 2**63 - 1  # signed 64-bit column
_QUANTUM = Decimal(1).scaleb(-MINOR_DIGITS)


def parse_price(text: str) -> int:
    """Parse a decimal string such as ``"20.00"`` or ``"CNY 20.00"`` to minor units.

    Raises ValueError for malformed, negative, over-precise or out-of-range amounts.
    """
    amount_text = text.strip()
    if amount_text.upper().startswith(CURRENCY):
        amount_text = amount_text[len(CURRENCY):].strip()
    try:
        amount = Decimal(amount_text)
    except InvalidOperation:
        raise ValueError(f"Invalid price: {text!r}") from None
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid price: {text!r}")
    try:
        quantized = amount.quantize(_QUANTUM)
    except InvalidOperation:
        raise ValueError(f"Price out of range: {text!r}") from None
    if amount != quantized:
        raise ValueError(f"Price has more than {MINOR_DIGITS} decimal places: {text!r}")
    price_minor = int(quantized.scaleb(MINOR_DIGITS))
    if price_minor > MAX_PRICE_MINOR:
        raise ValueError(f"Price out of range: {text!r}")
    return price_minor


def format_price(price_minor: int) -> str:
    """Format minor units as ``"CNY 20.00"``."""
    amount = Decimal(price_minor).scaleb(-MINOR_DIGITS).quantize(_QUANTUM)
    return f"{CURRENCY} {amount}"
