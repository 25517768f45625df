# backoffice/utils/formatters.py
from decimal import Decimal

from backoffice.core.config import CURRENCY_DECIMALS
from backoffice.utils.decimal_utils import to_decimal


def format_currency(amount, decimals: int = CURRENCY_DECIMALS, symbol: str = "$") -> str:
    """
    Format an amount the way the es-CO locale prints COP:
    dot as thousands separator, comma as decimal separator.

    >>> format_currency(1234567)
    '$ 1.234.567'
    """
    quantum = Decimal(1).scaleb(-decimals)
    value = to_decimal(amount, places=quantum)
    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):.{decimals}f}".partition(".")
    grouped = f"{int(integer_part):,}".replace(",", ".")
    text = f"{grouped},{fraction}" if fraction else grouped
    return f"{sign}{symbol} {text}"
