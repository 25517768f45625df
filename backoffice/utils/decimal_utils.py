# backoffice/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

TWO_PLACES = Decimal("0.01")


def to_decimal(value, places: Decimal = TWO_PLACES) -> Decimal:
    """Coerce any numeric-ish value to a Decimal quantized half-up. None and garbage become 0."""
    if value is None:
        return Decimal("0").quantize(places)
    try:
        return Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return Decimal("0").quantize(places)


def round2(value) -> float:
    """Half-up rounding to 2 decimals, returned as float for JSON/ORM columns."""
    return float(to_decimal(value))


def as_number(value, default: float = 0.0) -> float:
    """Missing or non-numeric inputs default to 0 instead of raising."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
