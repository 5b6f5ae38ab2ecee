"""
pricing/aggregation.py

Invoice totals are sums of line results, field by field. They are never
re-derived from summed prices: lines carry different discounts, so a
recomputation from totals would put tax on the wrong base.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .calculations import LineInput, LineResult, compute_line
from .discounts import DiscountPolicy, apply_policy

__all__ = ["InvoiceTotals", "aggregate", "totals_of"]


@dataclass(frozen=True)
class InvoiceTotals:
    gross_amount: float = 0.0
    total_tax_base: float = 0.0
    total_discount: float = 0.0
    total_taxable_base: float = 0.0
    total_tax: float = 0.0
    grand_total: float = 0.0


def totals_of(results: Iterable[LineResult]) -> InvoiceTotals:
    results = list(results)
    return InvoiceTotals(
        gross_amount=sum((r.amount for r in results), 0.0),
        total_tax_base=sum((r.tax_base for r in results), 0.0),
        total_discount=sum((r.discount_amount for r in results), 0.0),
        total_taxable_base=sum((r.taxable_base for r in results), 0.0),
        total_tax=sum((r.tax_amount for r in results), 0.0),
        grand_total=sum((r.line_total for r in results), 0.0),
    )


def aggregate(
    lines: Iterable[LineInput],
    policy: Optional[DiscountPolicy] = None,
) -> tuple[list[LineResult], InvoiceTotals]:
    """
    Price every line, then total them.

    All lines are priced before anything is summed, so an InvalidInput on any
    line leaves no partial totals behind. An empty iterable gives zero totals.
    """
    lines = list(lines)
    if policy is not None:
        lines = apply_policy(lines, policy)
    results = [compute_line(ln) for ln in lines]
    return results, totals_of(results)
