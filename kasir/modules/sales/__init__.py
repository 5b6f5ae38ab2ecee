"""
Sales module package exports.

Headless pieces (cart, checkout, editor, invoice document) are exported
here. The Qt table models live in `kasir.modules.sales.model` and are
imported from there so that this package does not pull in PySide6.
"""

from .cart import Cart, CartItem
from .checkout import (
    CheckoutError,
    CheckoutResult,
    CheckoutService,
    InsufficientPayment,
    change_due,
    compose_notes,
    effective_payment,
    invoice_status_for,
    sales_name_from_notes,
)
from .editor import EditLine, SaleEditor, SaleRecomputation, line_inputs_from_items
from .invoice import (
    ReceiptConfig,
    build_invoice_context,
    invoice_filename,
    invoice_html_for_sale,
    preview_invoice_context,
    preview_invoice_html,
    render_invoice_html,
    write_invoice_pdf,
)

__all__ = [
    "Cart",
    "CartItem",
    "CheckoutError",
    "CheckoutResult",
    "CheckoutService",
    "InsufficientPayment",
    "change_due",
    "compose_notes",
    "effective_payment",
    "invoice_status_for",
    "sales_name_from_notes",
    "EditLine",
    "SaleEditor",
    "SaleRecomputation",
    "line_inputs_from_items",
    "ReceiptConfig",
    "build_invoice_context",
    "invoice_filename",
    "invoice_html_for_sale",
    "preview_invoice_context",
    "preview_invoice_html",
    "render_invoice_html",
    "write_invoice_pdf",
]
