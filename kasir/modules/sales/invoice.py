"""
sales/invoice.py

Printable sale invoice: a Jinja2 HTML document, optionally written to PDF
with WeasyPrint.

Every figure on the document comes from the pricing engine run over the
stored lines. The stored header total is only compared (the reconciliation
travels in the context), so a drifted sale still prints the recomputed
TOTAL.
"""
from __future__ import annotations

import logging
import re
import sqlite3
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from jinja2 import Template

from ...config import BASE_DIR, StoreSettings
from ...constants import INVOICE_TEMPLATE_PATH, PPN
from ...database.repositories.sales_repo import SaleHeader, SalesRepo
from ...database.repositories.settings_repo import SettingsRepo
from ...utils.helpers import fmt_currency, fmt_percent, today_str
from ..pricing import (
    DiscountPolicy,
    Equal,
    InvoiceTotals,
    LineInput,
    Reconciliation,
    aggregate,
    clamp_percent,
    reconcile,
)
from .cart import Cart
from .checkout import (
    CheckoutError,
    change_due,
    compose_notes,
    effective_payment,
    invoice_status_for,
    sales_name_from_notes,
)

_log = logging.getLogger(__name__)

PREVIEW_NUMBER_PREFIX = "PREVIEW-"

# A5 landscape fits a cashier printer tray and the two-column totals block.
_INVOICE_PDF_CSS = """
    @page {
        margin: 10mm;
        size: A5 landscape;
    }
    body {
        margin: 0 !important;
        padding: 0 !important;
        width: 100% !important;
    }
"""


@dataclass
class ReceiptConfig:
    """
    Which totals rows the printed invoice shows, plus the special-customer discount.

    Only SUB TOTAL is on by default. Total Discount is not switchable: it
    prints whenever the sale carries a discount, so `show_discount` is kept
    for stored receipt settings but does not hide the row.
    """
    show_amount: bool = True
    show_dpp_faktur: bool = False
    show_discount: bool = False
    show_ppn11: bool = False
    discount_percentage: float = 0.0

    def policy(self) -> Optional[DiscountPolicy]:
        pct = clamp_percent(self.discount_percentage)
        if pct <= 0:
            return None
        return DiscountPolicy(global_percent=pct, applies_to_all_lines=True)


def invoice_filename(sale_number: str, max_length: int = 100) -> str:
    """Invoice-<sale_number>.pdf, with anything unsafe for a filename replaced."""
    sanitized = re.sub(r"[^A-Za-z0-9._-]", "_", sale_number or "")[:max_length]
    if not sanitized:
        sanitized = f"sale_{uuid.uuid4().hex[:8]}"
    return f"Invoice-{sanitized}.pdf"


def _discount_label(pct: float) -> str:
    return fmt_percent(pct) if pct > 0 else "-"


def build_invoice_context(
    header: SaleHeader,
    items: Iterable[Mapping],
    settings: StoreSettings,
    config: Optional[ReceiptConfig] = None,
) -> dict:
    """
    Assemble the template context for one sale.

    `items` are rows shaped like SalesRepo.list_items_with_names(): each
    needs product_name, quantity, unit_price and discount (the effective
    percent stored at checkout).
    """
    config = config or ReceiptConfig()
    rows = list(items)
    results, totals = aggregate(
        [LineInput(float(r["unit_price"]), r["quantity"], float(r["discount"] or 0.0)) for r in rows]
    )
    outcome: Reconciliation = reconcile(header.total_amount, totals.grand_total) if rows else Equal()

    lines = []
    for idx, (row, res) in enumerate(zip(rows, results), start=1):
        pct = float(row["discount"] or 0.0)
        lines.append({
            "idx": idx,
            "name": row.get("product_name") or f"#{row.get('product_id')}",
            "quantity": int(row["quantity"]),
            "unit_price": fmt_currency(float(row["unit_price"])),
            "discount": _discount_label(pct),
            "discount_amount": fmt_currency(res.discount_amount) if pct > 0 else "",
            "line_total": fmt_currency(res.line_total),
        })

    return {
        "store": asdict(settings),
        "doc": {
            "sale_number": header.sale_number,
            "date": (header.created_at or "")[:10],
            "customer_name": header.customer_name or "",
            "sales_name": sales_name_from_notes(header.notes),
            "payment_method": header.payment_method,
            "invoice_status": header.invoice_status,
            "payment_received": fmt_currency(header.payment_received),
            "change_amount": fmt_currency(header.change_amount),
        },
        "items": lines,
        "totals": _totals_rows(totals, config),
        "grand_total": fmt_currency(totals.grand_total),
        "payment_notes": [n for n in (settings.payment_note_line1, settings.payment_note_line2) if n],
        "reconciliation": outcome,
        "drifted": outcome.drifted,
        "stored_total": fmt_currency(header.total_amount),
    }


def _totals_rows(totals: InvoiceTotals, config: ReceiptConfig) -> list[dict]:
    rows = []
    if config.show_amount:
        rows.append({"label": "SUB TOTAL", "value": fmt_currency(totals.gross_amount)})
    if totals.total_discount > 0:
        rows.append({"label": "Total Discount", "value": f"-{fmt_currency(totals.total_discount)}"})
    if config.show_dpp_faktur:
        rows.append({"label": "DPP Faktur", "value": fmt_currency(totals.total_taxable_base)})
    if config.show_ppn11:
        rows.append({"label": f"PPN {PPN.percent}%", "value": fmt_currency(totals.total_tax)})
    return rows


def load_invoice_template(path: Optional[Union[str, Path]] = None) -> str:
    full_path = Path(path) if path else BASE_DIR / INVOICE_TEMPLATE_PATH
    try:
        return full_path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError) as e:
        _log.error("Invoice template not found at %s: %s", full_path, e)
        raise FileNotFoundError(f"Invoice template not found at: {full_path}") from e


def render_invoice_html(context: Mapping, template_path: Optional[Union[str, Path]] = None) -> str:
    template = Template(load_invoice_template(template_path), autoescape=True)
    return template.render(**context)


def write_invoice_pdf(html: str, path: Union[str, Path]) -> Path:
    """Render `html` to a PDF file at `path` and return the path."""
    from weasyprint import CSS, HTML

    out = Path(path)
    HTML(string=html).write_pdf(str(out), stylesheets=[CSS(string=_INVOICE_PDF_CSS)])
    _log.info("Invoice written to %s", out)
    return out


def invoice_html_for_sale(
    conn: sqlite3.Connection,
    sale_id: str,
    config: Optional[ReceiptConfig] = None,
) -> str:
    """Reprint path: load header, named lines and store settings, then render."""
    repo = SalesRepo(conn)
    header = repo.require_header(sale_id)
    items = repo.list_items_with_names(sale_id)
    settings = SettingsRepo(conn).store_settings()
    context = build_invoice_context(header, items, settings, config)
    if context["drifted"]:
        _log.warning(
            "Reprinting %s with recomputed total %s (stored %s)",
            header.sale_number, context["grand_total"], context["stored_total"],
        )
    return render_invoice_html(context)


def preview_invoice_context(
    cart: Cart,
    settings: StoreSettings,
    config: Optional[ReceiptConfig] = None,
    *,
    payment_method: str = "cash",
    payment_received: float = 0.0,
    customer_name: Optional[str] = None,
    cashier_name: Optional[str] = None,
    date: Optional[str] = None,
) -> dict:
    """
    Invoice context for a cart that has not been checked out yet.

    The cart is priced with the receipt's special-customer discount and
    wrapped in an unsaved header numbered PREVIEW-<epoch ms>. Nothing is
    read from or written to the database.
    """
    if cart.is_empty:
        raise CheckoutError("Cart is empty")
    config = config or ReceiptConfig()
    lines = cart.line_inputs(config.policy())
    _, totals = aggregate(lines)
    total = totals.grand_total
    received = effective_payment(payment_method, payment_received, total)

    header = SaleHeader(
        sale_id="preview",
        sale_number=f"{PREVIEW_NUMBER_PREFIX}{int(time.time() * 1000)}",
        customer_name=customer_name or None,
        subtotal=totals.gross_amount,
        tax_amount=totals.total_tax,
        total_amount=total,
        payment_method=payment_method,
        payment_received=received,
        change_amount=change_due(received, total),
        invoice_status=invoice_status_for(payment_method),
        notes=compose_notes(cashier_name, None),
        created_by=None,
        created_at=date or today_str(),
    )
    rows = [
        {
            "product_id": it.product.product_id,
            "product_name": it.product.name,
            "quantity": ln.quantity,
            "unit_price": ln.unit_price,
            "discount": ln.discount_percent,
        }
        for it, ln in zip(cart.items, lines)
    ]
    return build_invoice_context(header, rows, settings, config)


def preview_invoice_html(cart: Cart, settings: StoreSettings, config: Optional[ReceiptConfig] = None, **kw) -> str:
    return render_invoice_html(preview_invoice_context(cart, settings, config, **kw))
