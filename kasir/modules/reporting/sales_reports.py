# kasir/modules/reporting/sales_reports.py
from __future__ import annotations

import csv
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ...constants import INVOICE_STATUS_PAID
from ...database.repositories.products_repo import Product
from ...database.repositories.sales_repo import SaleHeader, SalesRepo
from ..sales.checkout import sales_name_from_notes
from ..sales.editor import SaleEditor

_log = logging.getLogger(__name__)

SALES_EXPORT_HEADERS = [
    "Sale Number", "Date", "Customer", "Payment Method", "Subtotal", "Tax",
    "Total", "Payment Received", "Change", "Status", "Notes",
]

PRODUCTS_EXPORT_HEADERS = [
    "SKU", "Name", "Category", "Price", "Cost", "Stock", "Min Stock",
    "Status", "Created",
]

__all__ = [
    "SALES_EXPORT_HEADERS",
    "PRODUCTS_EXPORT_HEADERS",
    "DriftRow",
    "sales_stats",
    "sales_export_rows",
    "products_export_rows",
    "write_csv",
    "sales_report_filename",
    "products_report_filename",
    "sales_name_from_notes",
    "drift_report",
]


def _date_part(ts: Optional[str]) -> str:
    return (ts or "")[:10]


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def sales_stats(sales: Sequence[SaleHeader]) -> Dict[str, float]:
    """
    Count, revenue and average order value over stored totals.

    Revenue uses the stored `total_amount`; drifted sales show up in
    drift_report(), not here.
    """
    total_sales = len(sales)
    total_revenue = sum((float(s.total_amount or 0.0) for s in sales), 0.0)
    avg = total_revenue / total_sales if total_sales else 0.0
    return {
        "total_sales": total_sales,
        "total_revenue": total_revenue,
        "avg_order_value": avg,
    }


# ---------------------------------------------------------------------------
# Export rows
# ---------------------------------------------------------------------------

def sales_export_rows(sales: Iterable[SaleHeader]) -> List[Dict[str, Any]]:
    return [
        {
            "Sale Number": s.sale_number,
            "Date": _date_part(s.created_at),
            "Customer": s.customer_name or "Walk-in",
            "Payment Method": s.payment_method,
            "Subtotal": s.subtotal,
            "Tax": s.tax_amount,
            "Total": s.total_amount,
            "Payment Received": s.payment_received,
            "Change": s.change_amount,
            "Status": s.invoice_status or INVOICE_STATUS_PAID,
            "Notes": s.notes or "",
        }
        for s in sales
    ]


def products_export_rows(products: Iterable[Product]) -> List[Dict[str, Any]]:
    return [
        {
            "SKU": p.sku or "",
            "Name": p.name,
            "Category": p.category or "No Category",
            "Price": p.price,
            "Cost": p.cost,
            "Stock": p.stock_quantity,
            "Min Stock": p.min_stock_level,
            "Status": "Active" if p.is_active else "Inactive",
            "Created": _date_part(p.created_at),
        }
        for p in products
    ]


def write_csv(path: Union[str, Path], rows: Sequence[Dict[str, Any]], headers: Optional[Sequence[str]] = None) -> Path:
    """
    Write dict rows to CSV with a header line. Headers default to the keys
    of the first row; an empty export still gets its header when given.
    """
    out = Path(path)
    cols = list(headers) if headers is not None else (list(rows[0].keys()) if rows else [])
    with open(out, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=cols)
        w.writeheader()
        for r in rows:
            w.writerow(r)
    _log.info("Exported %d row(s) to %s", len(rows), out)
    return out


def sales_report_filename(date_from: str, date_to: str) -> str:
    return f"Sales_Report_{date_from}_to_{date_to}.csv"


def products_report_filename(date_str: str) -> str:
    return f"Products_Report_{date_str}.csv"


# ---------------------------------------------------------------------------
# Drift audit
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DriftRow:
    sale_id: str
    sale_number: str
    stored_total: float
    recomputed_total: float
    delta: float


def drift_report(
    conn: sqlite3.Connection,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> List[DriftRow]:
    """Sales in the range whose stored total disagrees with a fresh recomputation."""
    editor = SaleEditor(conn)
    out: List[DriftRow] = []
    for header in SalesRepo(conn).list_sales(date_from, date_to):
        rc = editor.recompute(header.sale_id)
        if rc.reconciliation.drifted:
            out.append(DriftRow(
                sale_id=header.sale_id,
                sale_number=header.sale_number,
                stored_total=header.total_amount,
                recomputed_total=rc.totals.grand_total,
                delta=rc.reconciliation.delta,
            ))
    return out
