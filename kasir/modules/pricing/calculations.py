"""
pricing/calculations.py

Line math for tax-inclusive catalog prices.

Catalog prices already contain PPN, so every figure is derived backwards
from the price:

    tax_base      = 100/111 * price          (DPP)
    discount      = pct/100 * tax_base
    taxable_base  = tax_base - discount      (DPP Faktur)
    tax_amount    = 0.11 * taxable_base      (PPN)
    line_total    = taxable_base + tax_amount

Per-unit figures are computed first and only then multiplied by quantity,
so a line of q units equals q times the one-unit line bit for bit.

No rounding happens here. Formatting rounds once, for display.
Do not import repos or open DB connections here.
"""
from __future__ import annotations

from dataclasses import dataclass

from ...constants import PPN, PPN_NOMINAL, TaxRate
from ...utils.validators import try_parse_float, try_parse_int

__all__ = [
    "InvalidInput",
    "LineInput",
    "LineResult",
    "compute",
    "compute_line",
    "rate_equivalent_tax",
]


class InvalidInput(ValueError):
    """A line cannot be priced: negative price, quantity below one, bad discount."""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field} {value!r}: {reason}")


@dataclass(frozen=True)
class LineInput:
    unit_price: float
    quantity: int
    discount_percent: float = 0.0


@dataclass(frozen=True)
class LineResult:
    """All figures are for the whole line (already multiplied by quantity)."""
    amount: float              # gross, tax-inclusive price x qty
    tax_base: float            # DPP
    discount_amount: float
    taxable_base: float        # DPP Faktur
    other_taxable_base: float  # DPP Nilai Lain
    tax_amount: float          # PPN at the effective rate
    tax_amount_12: float       # same tax under the nominal 12% label
    line_total: float


def _validate(unit_price, quantity, discount_percent) -> tuple[float, int, float]:
    ok, price = try_parse_float(unit_price)
    if not ok or isinstance(unit_price, str):
        raise InvalidInput("unit_price", unit_price, "not a number")
    if price < 0:
        raise InvalidInput("unit_price", unit_price, "must be >= 0")

    ok, qty = try_parse_int(quantity)
    if not ok or isinstance(quantity, str):
        raise InvalidInput("quantity", quantity, "not a whole number")
    if qty < 1:
        raise InvalidInput("quantity", quantity, "must be >= 1")

    ok, pct = try_parse_float(discount_percent)
    if not ok or isinstance(discount_percent, str):
        raise InvalidInput("discount_percent", discount_percent, "not a number")
    if not 0 <= pct <= 100:
        raise InvalidInput("discount_percent", discount_percent, "must be within 0..100")

    return float(price), int(qty), float(pct)


def compute(unit_price, quantity, discount_percent=0.0, *, tax: TaxRate = PPN) -> LineResult:
    """
    Derive every monetary component of one line.

    Raises InvalidInput before computing anything if an argument is out of range.
    Strings are rejected; parse user input before it reaches the engine.
    """
    price, qty, pct = _validate(unit_price, quantity, discount_percent)

    tax_base = (100 / tax.inclusive_divisor) * price
    discount = (pct / 100) * tax_base
    taxable = tax_base - discount
    other_taxable = (tax.percent / PPN_NOMINAL.percent) * taxable
    tax_amount = tax.rate * taxable

    return LineResult(
        amount=qty * price,
        tax_base=tax_base * qty,
        discount_amount=discount * qty,
        taxable_base=taxable * qty,
        other_taxable_base=other_taxable * qty,
        tax_amount=tax_amount * qty,
        # PPN 11% and PPN 12% must come out as the same figure.
        tax_amount_12=tax_amount * qty,
        line_total=(taxable + tax_amount) * qty,
    )


def compute_line(line: LineInput, *, tax: TaxRate = PPN) -> LineResult:
    return compute(line.unit_price, line.quantity, line.discount_percent, tax=tax)


def rate_equivalent_tax(
    taxable_base: float,
    *,
    effective: TaxRate = PPN,
    nominal: TaxRate = PPN_NOMINAL,
) -> float:
    """
    Tax via the nominal-rate path: nominal rate on DPP Nilai Lain, where
    DPP Nilai Lain = effective/nominal of the taxable base.

    Equal to ``effective.rate * taxable_base`` up to float rounding.
    """
    other_taxable = (effective.percent / nominal.percent) * taxable_base
    return nominal.rate * other_taxable
