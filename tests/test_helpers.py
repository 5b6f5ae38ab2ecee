# tests/test_helpers.py
from decimal import Decimal

import pytest

from kasir.utils.helpers import fmt_currency, fmt_money, fmt_percent, round_half_up

NBSP = "\u00a0"


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, f"Rp{NBSP}0"),
        (199800, f"Rp{NBSP}199.800"),
        (199800.00000000003, f"Rp{NBSP}199.800"),
        (1234567.0, f"Rp{NBSP}1.234.567"),
        (999.5, f"Rp{NBSP}1.000"),
        (999.49, f"Rp{NBSP}999"),
        (-1500, f"-Rp{NBSP}1.500"),
        (-0.4, f"Rp{NBSP}0"),
    ],
)
def test_fmt_currency(amount, expected):
    assert fmt_currency(amount) == expected


def test_fmt_currency_rejects_non_numbers():
    with pytest.raises(ValueError):
        fmt_currency("abc")
    with pytest.raises(ValueError):
        fmt_currency(float("nan"))
    with pytest.raises(ValueError):
        fmt_currency(True)


def test_round_half_up_uses_decimal_repr():
    assert round_half_up(2.675, 2) == Decimal("2.68")
    assert round_half_up(0.5) == Decimal("1")
    assert round_half_up(-0.5) == Decimal("-1")
    assert round_half_up(1.5) == Decimal("2")
    assert round_half_up(2.5) == Decimal("3")


def test_fmt_money_defaults():
    assert fmt_money(1234.5) == "1,234.50"
    assert fmt_money(1234.5, 0, thousands=".", decimal=",") == "1.235"
    assert fmt_money(1234.5, 2, thousands=".", decimal=",") == "1.234,50"


def test_fmt_money_fallbacks():
    assert fmt_money("n/a") == "n/a"
    assert fmt_money("n/a", sentinel="-") == "-"
    with pytest.raises(ValueError):
        fmt_money("n/a", strict=True)


def test_fmt_percent():
    assert fmt_percent(10) == "10%"
    assert fmt_percent(12.5) == "12.5%"
    assert fmt_percent(0.0) == "0%"
