"""
Fixed-point token amount helpers.

Token amounts travel through the bot as integers in base units. These helpers
convert between base units and human-readable ``Decimal`` values without ever
going through binary floating point.
"""

from decimal import ROUND_DOWN, Context, Decimal, InvalidOperation
from typing import Union

from .exceptions import ValidationError

MAX_DECIMALS = 18

# uint256 has 78 decimal digits
_WIDE = Context(prec=80)

Number = Union[str, int, float, Decimal]


def _check_decimals(decimals: int) -> None:
    if not isinstance(decimals, int) or isinstance(decimals, bool):
        raise ValidationError(f"Token decimals must be an integer, got {decimals!r}")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise ValidationError(
            f"Token decimals must be between 0 and {MAX_DECIMALS}, got {decimals}"
        )


def to_decimal(value: Number) -> Decimal:
    """Convert a human amount to Decimal, routing floats through str()."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not result.is_finite():
        raise ValidationError(f"Amount must be finite: {value!r}")
    return result


def parse_units(value: Number, decimals: int) -> int:
    """
    Convert a human-readable amount to integer base units.

    Args:
        value: Amount such as ``"10.5"`` or ``Decimal("0.004")``
        decimals: Token decimal precision (0-18)

    Returns:
        Amount in base units

    Raises:
        ValidationError: If the amount has more fractional digits than the
            token supports, or the precision is out of range

    Examples:
        >>> parse_units("10", 6)
        10000000
        >>> parse_units(0.5, 6)
        500000
    """
    _check_decimals(decimals)
    amount = to_decimal(value)
    scaled = amount.scaleb(decimals, context=_WIDE)
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"Amount {amount} has more than {decimals} fractional digits"
        )
    return int(scaled)


def format_units(amount: int, decimals: int) -> Decimal:
    """Convert integer base units to an exact Decimal amount."""
    _check_decimals(decimals)
    return Decimal(int(amount)).scaleb(-decimals, context=_WIDE)


def to_display(amount: int, decimals: int, places: int = 6) -> str:
    """Render base units as a fixed-place string for reports."""
    quantum = Decimal(1).scaleb(-places)
    return str(format_units(amount, decimals).quantize(quantum, context=_WIDE))


def truncate_units(value: Number, decimals: int) -> int:
    """Like parse_units, but drops digits past ``decimals`` instead of failing."""
    _check_decimals(decimals)
    amount = to_decimal(value).scaleb(decimals, context=_WIDE)
    return int(amount.to_integral_value(rounding=ROUND_DOWN, context=_WIDE))
