"""
sales/checkout.py

Turns a cart into a persisted sale.

Order of work matters: the cart is priced first, payment is validated
against the priced total, and only then is anything written. A bad line or a
short cash payment therefore never leaves a half-written sale behind.
"""
from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass
from typing import Optional

from ...constants import (
    INVOICE_STATUS_PAID,
    INVOICE_STATUS_UNPAID,
    PAYMENT_METHODS,
    RECONCILE_EPSILON,
)
from ...database.repositories.products_repo import DomainError
from ...database.repositories.sales_repo import SaleHeader, SaleItem, SalesRepo
from ...utils.helpers import fmt_currency, today_str
from ...utils.validators import try_parse_float
from ..pricing import DiscountPolicy, InvoiceTotals, LineResult, aggregate
from .cart import Cart

_log = logging.getLogger(__name__)


class CheckoutError(DomainError):
    pass


class InsufficientPayment(CheckoutError):
    def __init__(self, required: float, received: float):
        self.required = required
        self.received = received
        super().__init__(
            f"Insufficient payment. Required: {fmt_currency(required)}, "
            f"Received: {fmt_currency(received)}"
        )


@dataclass
class CheckoutResult:
    header: SaleHeader
    items: list[SaleItem]
    line_results: list[LineResult]
    totals: InvoiceTotals


def effective_payment(payment_method: str, payment_received, total: float) -> float:
    """Non-cash payments are always for the exact total."""
    if payment_method != "cash":
        return total
    ok, val = try_parse_float(payment_received)
    return val if ok and val is not None else 0.0


def change_due(received: float, total: float) -> float:
    return max(0.0, received - total)


def invoice_status_for(payment_method: str) -> str:
    return INVOICE_STATUS_UNPAID if payment_method == "credit" else INVOICE_STATUS_PAID


def compose_notes(cashier_name: Optional[str], bank_details: Optional[str]) -> Optional[str]:
    """'Sales: <name> | Bank Details: <details>' with either part optional."""
    parts = []
    if cashier_name:
        parts.append(f"Sales: {cashier_name}")
    if bank_details:
        parts.append(f"Bank Details: {bank_details}")
    return " | ".join(parts) or None


def sales_name_from_notes(notes: Optional[str]) -> str:
    """Cashier name out of compose_notes() text, or 'Unknown'."""
    if not notes or "Sales:" not in notes:
        return "Unknown"
    name = notes.split("Sales:", 1)[1].split("|", 1)[0].strip()
    return name or "Unknown"


class CheckoutService:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.repo = SalesRepo(conn)

    def finalize(
        self,
        cart: Cart,
        *,
        payment_method: str = "cash",
        payment_received: float = 0.0,
        customer_name: Optional[str] = None,
        cashier_name: Optional[str] = None,
        bank_details: Optional[str] = None,
        created_by: Optional[str] = None,
        policy: Optional[DiscountPolicy] = None,
        date: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Price the cart, validate payment, then write header, items and stock
        movements in one transaction.

        Raises CheckoutError (empty cart, unknown payment method),
        InsufficientPayment, InvalidInput or OutOfStock; none of them leave
        rows behind.
        """
        if cart.is_empty:
            raise CheckoutError("Cart is empty")
        if payment_method not in PAYMENT_METHODS:
            raise CheckoutError(f"Unknown payment method: {payment_method!r}")

        lines = cart.line_inputs(policy)
        line_results, totals = aggregate(lines)
        total = totals.grand_total

        received = effective_payment(payment_method, payment_received, total)
        # a shortfall under half a rupiah is float noise, not an unpaid amount
        if total - received >= RECONCILE_EPSILON:
            raise InsufficientPayment(total, received)

        sale_date = date or today_str()
        sale_id = uuid.uuid4().hex
        header = SaleHeader(
            sale_id=sale_id,
            sale_number=self.repo.next_sale_number(sale_date),
            customer_name=customer_name or None,
            subtotal=totals.gross_amount,
            tax_amount=totals.total_tax,
            total_amount=total,
            payment_method=payment_method,
            payment_received=received,
            change_amount=change_due(received, total),
            invoice_status=invoice_status_for(payment_method),
            notes=compose_notes(cashier_name, bank_details),
            created_by=created_by,
            created_at=date,  # None: database clock
        )
        items = [
            SaleItem(
                item_id=None,
                sale_id=sale_id,
                product_id=cart_item.product.product_id,
                quantity=ln.quantity,
                unit_price=ln.unit_price,
                discount=ln.discount_percent,
                subtotal=res.line_total,
            )
            for cart_item, ln, res in zip(cart.items, lines, line_results)
        ]

        self.repo.create_sale(header, items)
        _log.info(
            "Sale %s completed: %d line(s), total %s, paid by %s",
            header.sale_number, len(items), fmt_currency(total), payment_method,
        )
        saved = self.repo.require_header(sale_id)
        return CheckoutResult(saved, items, line_results, totals)
