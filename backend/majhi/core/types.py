"""
Majhi Costing - Canonical Money & Quantity Types
================================================

RULE: No floats allowed for money or quantities.

Money:  int micros (1 rupee = 1_000_000 micros)
        - Prevents rounding errors on stored prices
        - JSON-serializable as integer

Quantity: Decimal (for partial units like 0.35 KG of gravy)
        - Serialized as string in JSON
        - Never use float

Computed costs are Decimal in major currency units and are only rounded
for display.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer, WithJsonSchema


# =============================================================================
# MONEY (Integer Micros)
# =============================================================================
# 1 rupee = 1,000,000 micros
# ₹1500 = 1_500_000_000 micros

MICROS_PER_UNIT = 1_000_000

# Accepted magnitudes: 1e-15 <= |value| < 1e16 (zero always allowed).
# Keeps every product and quotient the engine forms far inside the
# decimal context's exponent range.
MAX_ADJUSTED_EXPONENT = 15
MIN_ADJUSTED_EXPONENT = -15
MAX_MONEY_MICROS = 10 ** (MAX_ADJUSTED_EXPONENT + 1) * MICROS_PER_UNIT


def _check_magnitude(dec: Decimal, what: str) -> Decimal:
    """Reject values too large (or, for quantities, too small) to cost safely."""
    if dec and not MIN_ADJUSTED_EXPONENT <= dec.adjusted() <= MAX_ADJUSTED_EXPONENT:
        raise ValueError(f"{what} out of range: {dec}")
    return dec


def _major_to_micros(dec: Decimal) -> int:
    if dec and dec.adjusted() > MAX_ADJUSTED_EXPONENT:
        raise ValueError(f"Money amount out of range: {dec}")
    return int(dec * MICROS_PER_UNIT)


def _validate_money_micros(v: Any) -> int:
    """
    Validate and convert to money micros.

    Accepts:
        - int: Already in micros
        - str: Parse as decimal major units, convert to micros
        - Decimal: Convert to micros
        - float: REJECTED (raises ValueError)
    """
    if isinstance(v, float):
        raise ValueError(
            "Float not allowed for money. Use int micros or Decimal string. "
            f"Got: {v}"
        )

    if isinstance(v, int):
        if abs(v) >= MAX_MONEY_MICROS:
            raise ValueError(f"Money micros out of range: {v}")
        return v

    if isinstance(v, str):
        try:
            dec = Decimal(v.strip())
        except InvalidOperation:
            raise ValueError(f"Invalid money string: {v}")
        if not dec.is_finite():
            raise ValueError(f"Money must be finite, got: {dec}")
        return _major_to_micros(dec)

    if isinstance(v, Decimal):
        if not v.is_finite():
            raise ValueError(f"Money must be finite, got: {v}")
        return _major_to_micros(v)

    raise ValueError(f"Invalid money type: {type(v)}")


MoneyMicros = Annotated[
    int,
    BeforeValidator(_validate_money_micros),
    WithJsonSchema({"type": "integer", "description": "Money in micros (1 rupee = 1,000,000)"}),
]


class Money:
    """
    Money utilities for working with micros.

    Usage:
        price_micros = Money.from_major("1500")  # -> 1_500_000_000
        price_dec = Money.to_decimal(1_500_000_000)  # -> Decimal("1500")
        price_str = Money.to_str(Decimal("70.5882"))  # -> "70.59"
    """

    @staticmethod
    def from_major(amount: Decimal | str | int) -> int:
        """Convert major currency units to micros. No floats allowed."""
        if isinstance(amount, float):
            raise ValueError("Float not allowed. Use Decimal or string.")
        dec = Decimal(str(amount))
        if not dec.is_finite():
            raise ValueError(f"Money must be finite, got: {dec}")
        return _major_to_micros(dec)

    @staticmethod
    def to_decimal(micros: int) -> Decimal:
        """Convert micros to Decimal major units."""
        return Decimal(micros) / MICROS_PER_UNIT

    @staticmethod
    def to_str(amount: Decimal, places: int = 2) -> str:
        """Format a computed Decimal amount for display."""
        return str(quantize(amount, places))


def quantize(value: Decimal, places: int = 2) -> Decimal:
    """Round half-up to a fixed number of places (display only)."""
    return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)


# =============================================================================
# QUANTITY (Decimal)
# =============================================================================
# For partial units like 1.5 KG onion, 0.05 PKT garam masala

def _validate_quantity(v: Any) -> Decimal:
    """
    Validate and convert to Decimal quantity.

    Accepts:
        - Decimal: Pass through
        - str: Parse as Decimal
        - int: Convert to Decimal
        - float: REJECTED (raises ValueError)
    """
    if isinstance(v, float):
        raise ValueError(
            "Float not allowed for quantity. Use Decimal or string. "
            f"Got: {v}"
        )

    if isinstance(v, bool):
        raise ValueError(f"Invalid quantity type: {type(v)}")

    if isinstance(v, Decimal):
        dec = v
    elif isinstance(v, (str, int)):
        try:
            dec = Decimal(str(v).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid quantity: {v}")
    else:
        raise ValueError(f"Invalid quantity type: {type(v)}")

    if not dec.is_finite():
        raise ValueError(f"Quantity must be finite, got: {dec}")
    return _check_magnitude(dec, "Quantity")


def _serialize_decimal(v: Decimal) -> str:
    """Serialize Decimal as string (prevents JSON float issues)."""
    return str(v)


Quantity = Annotated[
    Decimal,
    BeforeValidator(_validate_quantity),
    PlainSerializer(_serialize_decimal),
    WithJsonSchema({"type": "string", "description": "Decimal quantity as string"}),
]


# =============================================================================
# PERCENTAGE (Decimal, 0-100)
# =============================================================================

def _validate_percentage(v: Any) -> Decimal:
    """Validate percentage as Decimal 0-100."""
    dec = _validate_quantity(v)

    if dec < 0 or dec > 100:
        raise ValueError(f"Percentage must be 0-100, got: {dec}")

    return dec


Percentage = Annotated[
    Decimal,
    BeforeValidator(_validate_percentage),
    PlainSerializer(_serialize_decimal),
    WithJsonSchema({"type": "string", "description": "Percentage 0-100"}),
]


# Output-only Decimal: costs and ratios computed by the engine
Amount = Annotated[
    Decimal,
    PlainSerializer(_serialize_decimal),
    WithJsonSchema({"type": "string", "description": "Computed decimal amount"}),
]


__all__ = [
    # Money
    "MoneyMicros",
    "Money",
    "MICROS_PER_UNIT",
    "quantize",

    # Quantity
    "Quantity",
    "Amount",

    # Rates
    "Percentage",
]
