"""
sales/editor.py

Editing and re-reading a stored sale.

An edit is a full recomputation: the edited lines go through the same
pricing engine as checkout and the result replaces the stored items and
header totals. Nothing is patched incrementally, so repeated edits cannot
accumulate rounding drift.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Iterable, Optional

from ...constants import RECONCILE_EPSILON
from ...database.repositories.sales_repo import SaleHeader, SaleItem, SalesRepo
from ...utils.helpers import fmt_currency
from ..pricing import InvoiceTotals, LineInput, LineResult, Reconciliation, aggregate, reconcile
from .checkout import CheckoutError, InsufficientPayment, change_due

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditLine:
    """One line of an edited sale: a product plus the pricing inputs."""
    product_id: int
    unit_price: float
    quantity: int
    discount_percent: float = 0.0

    def line_input(self) -> LineInput:
        return LineInput(self.unit_price, self.quantity, self.discount_percent)


@dataclass
class SaleRecomputation:
    header: SaleHeader
    items: list[SaleItem]
    line_results: list[LineResult]
    totals: InvoiceTotals
    reconciliation: Reconciliation


def line_inputs_from_items(items: Iterable[SaleItem]) -> list[LineInput]:
    """Rebuild engine inputs from persisted (unit_price, quantity, discount) rows."""
    return [LineInput(it.unit_price, it.quantity, it.discount) for it in items]


class SaleEditor:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.repo = SalesRepo(conn)

    def recompute(self, sale_id: str) -> SaleRecomputation:
        """
        Re-price a stored sale from its persisted lines without writing.

        Used on reprint and by the drift report. The returned totals are the
        ones to show; the stored header total is only compared against them.
        """
        header = self.repo.require_header(sale_id)
        items = self.repo.list_items(sale_id)
        results, totals = aggregate(line_inputs_from_items(items))
        outcome = reconcile(header.total_amount, totals.grand_total)
        if outcome.drifted:
            _log.warning(
                "Sale %s: stored total %s differs from recomputed %s (delta %.6f)",
                header.sale_number,
                fmt_currency(header.total_amount),
                fmt_currency(totals.grand_total),
                outcome.delta,
            )
        return SaleRecomputation(header, items, results, totals, outcome)

    def update_items(
        self,
        sale_id: str,
        lines: Iterable[EditLine],
        *,
        payment_received: Optional[float] = None,
    ) -> SaleRecomputation:
        """
        Replace a sale's lines and overwrite its totals with the recomputed ones.

        All lines are priced before any write, so InvalidInput leaves the sale
        untouched. Non-cash sales keep payment_received equal to the new
        total; cash sales keep what was received unless `payment_received`
        is given, and change is recomputed either way. A cash sale whose
        new total is not covered raises InsufficientPayment before any write.
        """
        lines = list(lines)
        if not lines:
            raise CheckoutError("A sale must keep at least one line")
        before = self.repo.require_header(sale_id)
        results, totals = aggregate([ln.line_input() for ln in lines])
        outcome = reconcile(before.total_amount, totals.grand_total)

        if before.payment_method != "cash":
            received = totals.grand_total
        elif payment_received is not None:
            received = float(payment_received)
        else:
            received = before.payment_received
        if totals.grand_total - received >= RECONCILE_EPSILON:
            raise InsufficientPayment(totals.grand_total, received)

        header = SaleHeader(
            sale_id=before.sale_id,
            sale_number=before.sale_number,
            customer_name=before.customer_name,
            subtotal=totals.gross_amount,
            tax_amount=totals.total_tax,
            total_amount=totals.grand_total,
            payment_method=before.payment_method,
            payment_received=received,
            change_amount=change_due(received, totals.grand_total),
            invoice_status=before.invoice_status,
            notes=before.notes,
            created_by=before.created_by,
            created_at=before.created_at,
        )
        items = [
            SaleItem(
                item_id=None,
                sale_id=sale_id,
                product_id=ln.product_id,
                quantity=int(ln.quantity),
                unit_price=float(ln.unit_price),
                discount=float(ln.discount_percent),
                subtotal=res.line_total,
            )
            for ln, res in zip(lines, results)
        ]

        self.repo.replace_items(header, items)
        if outcome.drifted:
            _log.info(
                "Sale %s edited: total %s -> %s",
                header.sale_number,
                fmt_currency(before.total_amount),
                fmt_currency(totals.grand_total),
            )
        return SaleRecomputation(self.repo.require_header(sale_id), items, results, totals, outcome)
