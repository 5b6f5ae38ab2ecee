# kasir/utils/helpers.py
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import logging
from typing import Union, Optional

from ..constants import (
    CURRENCY_DECIMAL_SEP,
    CURRENCY_PLACES,
    CURRENCY_SYMBOL,
    CURRENCY_SYMBOL_SEPARATOR,
    CURRENCY_THOUSANDS_SEP,
)

NumberLike = Union[float, int, str, Decimal]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def round_half_up(v: NumberLike, places: int = 0) -> Decimal:
    """
    Round to `places` decimals, halves away from zero.

    Floats go through their shortest repr first, so 2.675 rounds like the
    literal it prints as and not like its binary neighbour.
    """
    d = Decimal(repr(v)) if isinstance(v, float) else Decimal(str(v))
    if not d.is_finite():
        raise InvalidOperation(f"Cannot round non-finite value {v!r}")
    return d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _group(d: Decimal, places: int, thousands: str, decimal: str) -> str:
    text = f"{d:,.{places}f}"
    return text.translate({ord(","): "\0", ord("."): decimal}).replace("\0", thousands)


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
    thousands: str = ",",
    decimal: str = ".",
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Rounds half-up at this final step only; callers pass unrounded figures.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), preserves legacy behavior and returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.

    Args:
        v: Value to format; floats, ints, Decimals or numeric strings.
        places: Number of decimal places (default: 2).
        strict: If True, raise on parse errors; else fall back.
        sentinel: If not None and parsing fails, return this string.
        thousands: Group separator.
        decimal: Decimal separator.

    Returns:
        Formatted string, or fallback per the rules above.
    """
    try:
        if isinstance(v, bool):
            raise TypeError("bool is not a money amount")
        d = round_half_up(v, places)
    except (InvalidOperation, TypeError, ValueError) as e:
        # Log at debug level to aid troubleshooting without spamming user logs.
        _log.debug("fmt_money: failed to parse %r as a number: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    if d == 0:
        d = abs(d)  # no "-0"
    return _group(d, places, thousands, decimal)


def fmt_currency(amount: NumberLike) -> str:
    """
    Render an amount as Rupiah for screens, receipts and exports.

    >>> fmt_currency(199800.0)
    'Rp\\xa0199.800'
    >>> fmt_currency(-1500)
    '-Rp\\xa01.500'

    Every consumer must go through here so a sale prints the same everywhere.
    Raises ValueError for values that are not finite numbers.
    """
    body = fmt_money(
        amount,
        CURRENCY_PLACES,
        strict=True,
        thousands=CURRENCY_THOUSANDS_SEP,
        decimal=CURRENCY_DECIMAL_SEP,
    )
    sign = ""
    if body.startswith("-"):
        sign, body = "-", body[1:]
    return f"{sign}{CURRENCY_SYMBOL}{CURRENCY_SYMBOL_SEPARATOR}{body}"


def fmt_percent(v: NumberLike) -> str:
    """Compact percent label for discount columns: 10 -> '10%', 12.5 -> '12.5%'."""
    try:
        x = float(v)
    except (TypeError, ValueError):
        return str(v)
    return f"{x:g}%"
