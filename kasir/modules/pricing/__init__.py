"""
Pricing engine: tax-inclusive line math, invoice totals, discount overlay
and stored-total reconciliation.

Checkout, the invoice document, the sale-item editor and the reports all
price lines through these functions; none of them re-derives the formula.
"""

from .calculations import (
    InvalidInput,
    LineInput,
    LineResult,
    compute,
    compute_line,
    rate_equivalent_tax,
)
from .discounts import DiscountPolicy, apply_policy, clamp_percent, resolve_discount
from .aggregation import InvoiceTotals, aggregate, totals_of
from .reconciliation import Drifted, Equal, Reconciliation, reconcile

__all__ = [
    "InvalidInput",
    "LineInput",
    "LineResult",
    "compute",
    "compute_line",
    "rate_equivalent_tax",
    "DiscountPolicy",
    "apply_policy",
    "clamp_percent",
    "resolve_discount",
    "InvoiceTotals",
    "aggregate",
    "totals_of",
    "Drifted",
    "Equal",
    "Reconciliation",
    "reconcile",
]
