import pytest

from backoffice.utils.decimal_utils import as_number, round2, to_decimal
from backoffice.utils.formatters import format_currency

@pytest.mark.parametrize(
    "amount, expected",
    [
        (1234567, "$ 1.234.567"),
        (0, "$ 0"),
        (999.5, "$ 1.000"),
        (-15000, "-$ 15.000"),
        (None, "$ 0"),
    ],
)
def test_format_currency_cop(amount, expected):
    assert format_currency(amount) == expected

def test_format_currency_with_decimals():
    assert format_currency(1234.5, decimals=2) == "$ 1.234,50"


def test_rounding_is_half_up():
    assert round2(2.675) == 2.68
    assert str(to_decimal("1.005")) == "1.01"


def test_as_number_defaults():
    assert as_number(None) == 0.0
    assert as_number("abc") == 0.0
    assert as_number(True) == 0.0
    assert as_number("12.5") == 12.5
