from __future__ import annotations
from dataclasses import dataclass
import sqlite3
from typing import Iterable

from ...constants import SALE_NUMBER_PREFIX
from .products_repo import DomainError, ProductsRepo


class SaleNotFound(DomainError, LookupError):
    def __init__(self, sale_id: str):
        self.sale_id = sale_id
        super().__init__(f"Unknown sale: {sale_id}")


@dataclass
class SaleHeader:
    sale_id: str
    sale_number: str
    customer_name: str | None
    subtotal: float           # gross, tax-inclusive
    tax_amount: float
    total_amount: float       # grand total from the pricing engine
    payment_method: str
    payment_received: float
    change_amount: float
    invoice_status: str
    notes: str | None
    created_by: str | None
    created_at: str | None = None


@dataclass
class SaleItem:
    item_id: int | None
    sale_id: str
    product_id: int
    quantity: int
    unit_price: float         # tax-inclusive
    discount: float           # percent
    subtotal: float           # line total from the pricing engine


_HEADER_COLUMNS = """
    sale_id, sale_number, customer_name,
    CAST(subtotal AS REAL)         AS subtotal,
    CAST(tax_amount AS REAL)       AS tax_amount,
    CAST(total_amount AS REAL)     AS total_amount,
    payment_method,
    CAST(payment_received AS REAL) AS payment_received,
    CAST(change_amount AS REAL)    AS change_amount,
    invoice_status, notes, created_by, created_at
"""


def new_sale_number(conn: sqlite3.Connection, date_str: str) -> str:
    """INV + yyyymmdd + -NNNN, sequential per day. Past 9999 the suffix just widens."""
    d = date_str.replace("-", "")
    prefix = f"{SALE_NUMBER_PREFIX}{d}-"
    # compare the suffix as a number; as text -9999 sorts above -10000
    row = conn.execute(
        "SELECT MAX(CAST(SUBSTR(sale_number, ?) AS INTEGER)) AS m FROM sales WHERE sale_number LIKE ?",
        (len(prefix) + 1, prefix + "%"),
    ).fetchone()
    last = int(row["m"]) if row and row["m"] is not None else 0
    return f"{prefix}{last+1:04d}"


class SalesRepo:
    """
    Sales repository.

    Key behavior:
      - Stores whatever totals it is handed. Totals come from the pricing
        engine; nothing here does price math.
      - Each sale posts one 'outbound' stock movement per item, referenced by
        sale_number, and decrements products.stock_quantity.
      - replace_items() rebuilds items, stock postings and header totals in a
        single transaction (used by the sale editor).
    """

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.products = ProductsRepo(conn)

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def list_sales(self, date_from: str | None = None, date_to: str | None = None) -> list[SaleHeader]:
        """
        Sales between two ISO dates (inclusive), newest first.
        """
        where = []
        params: list = []
        if date_from:
            where.append("DATE(created_at) >= DATE(?)")
            params.append(date_from)
        if date_to:
            where.append("DATE(created_at) <= DATE(?)")
            params.append(date_to)

        sql = f"SELECT {_HEADER_COLUMNS} FROM sales"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, sale_number DESC"
        return [SaleHeader(**dict(r)) for r in self.conn.execute(sql, params).fetchall()]

    def get_header(self, sid: str) -> SaleHeader | None:
        r = self.conn.execute(
            f"SELECT {_HEADER_COLUMNS} FROM sales WHERE sale_id=?", (sid,)
        ).fetchone()
        return SaleHeader(**dict(r)) if r else None

    def require_header(self, sid: str) -> SaleHeader:
        h = self.get_header(sid)
        if h is None:
            raise SaleNotFound(sid)
        return h

    def list_items(self, sid: str) -> list[SaleItem]:
        sql = """
        SELECT si.item_id, si.sale_id, si.product_id,
               si.quantity,
               CAST(si.unit_price AS REAL) AS unit_price,
               CAST(si.discount AS REAL)   AS discount,
               CAST(si.subtotal AS REAL)   AS subtotal
        FROM sale_items si
        WHERE si.sale_id = ?
        ORDER BY si.item_id
        """
        return [SaleItem(**dict(r)) for r in self.conn.execute(sql, (sid,)).fetchall()]

    def list_items_with_names(self, sid: str) -> list[dict]:
        sql = """
        SELECT si.item_id, si.product_id, p.name AS product_name, p.sku,
               si.quantity,
               CAST(si.unit_price AS REAL) AS unit_price,
               CAST(si.discount AS REAL)   AS discount,
               CAST(si.subtotal AS REAL)   AS subtotal
        FROM sale_items si
        JOIN products p ON p.product_id = si.product_id
        WHERE si.sale_id = ?
        ORDER BY si.item_id
        """
        return [dict(r) for r in self.conn.execute(sql, (sid,)).fetchall()]

    # ---------------------------------------------------------------------
    # INTERNAL WRITES
    # ---------------------------------------------------------------------
    def _insert_header(self, h: SaleHeader):
        self.conn.execute(
            """
            INSERT INTO sales (
                sale_id, sale_number, customer_name,
                subtotal, tax_amount, total_amount,
                payment_method, payment_received, change_amount,
                invoice_status, notes, created_by, created_at
            )
            VALUES (?,?,?,?,?,?,?,?,?,?,?,?,COALESCE(?, CURRENT_TIMESTAMP))
            """,
            (
                h.sale_id,
                h.sale_number,
                h.customer_name,
                h.subtotal,
                h.tax_amount,
                h.total_amount,
                h.payment_method,
                h.payment_received,
                h.change_amount,
                h.invoice_status,
                h.notes,
                h.created_by,
                h.created_at,
            ),
        )

    def _insert_item(self, it: SaleItem) -> int:
        cur = self.conn.execute(
            """
            INSERT INTO sale_items (
                sale_id, product_id, quantity, unit_price, discount, subtotal
            ) VALUES (?,?,?,?,?,?)
            """,
            (it.sale_id, it.product_id, it.quantity, it.unit_price, it.discount, it.subtotal),
        )
        return int(cur.lastrowid)

    def _post_outbound(self, it: SaleItem, sale_number: str, created_by: str | None):
        self.products.take_stock(it.product_id, it.quantity)
        self.conn.execute(
            """
            INSERT INTO stock_movements (
                product_id, transaction_type, quantity,
                reference_number, notes, created_by
            )
            VALUES (?, 'outbound', ?, ?, ?, ?)
            """,
            (it.product_id, it.quantity, sale_number, f"Sale: {sale_number}", created_by),
        )

    def _reverse_outbound(self, sale_number: str):
        rows = self.conn.execute(
            "SELECT product_id, quantity FROM stock_movements "
            "WHERE reference_number=? AND transaction_type='outbound'",
            (sale_number,),
        ).fetchall()
        for r in rows:
            self.products.return_stock(int(r["product_id"]), int(r["quantity"]))
        self.conn.execute(
            "DELETE FROM stock_movements WHERE reference_number=? AND transaction_type='outbound'",
            (sale_number,),
        )

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def create_sale(self, header: SaleHeader, items: Iterable[SaleItem]) -> None:
        """
        Insert header + items and post stock for each item, all or nothing.
        """
        with self.conn:
            self._insert_header(header)
            for it in items:
                it.sale_id = header.sale_id
                it.item_id = self._insert_item(it)
                self._post_outbound(it, header.sale_number, header.created_by)

    def replace_items(
        self,
        header: SaleHeader,
        items: Iterable[SaleItem],
    ) -> None:
        """
        Overwrite a sale's items and header totals. Old items and their stock
        postings are removed first; nothing from them is merged.
        """
        with self.conn:
            row = self.conn.execute(
                "SELECT sale_number FROM sales WHERE sale_id=?", (header.sale_id,)
            ).fetchone()
            if not row:
                raise SaleNotFound(header.sale_id)
            sale_number = row["sale_number"]

            self._reverse_outbound(sale_number)
            self.conn.execute("DELETE FROM sale_items WHERE sale_id=?", (header.sale_id,))

            self.conn.execute(
                """
                UPDATE sales
                   SET subtotal=?,
                       tax_amount=?,
                       total_amount=?,
                       payment_received=?,
                       change_amount=?,
                       invoice_status=?
                 WHERE sale_id=?
                """,
                (
                    header.subtotal,
                    header.tax_amount,
                    header.total_amount,
                    header.payment_received,
                    header.change_amount,
                    header.invoice_status,
                    header.sale_id,
                ),
            )

            for it in items:
                it.sale_id = header.sale_id
                it.item_id = self._insert_item(it)
                self._post_outbound(it, sale_number, header.created_by)

    def next_sale_number(self, date_str: str) -> str:
        return new_sale_number(self.conn, date_str)
