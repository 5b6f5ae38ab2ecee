# kasir/database/repositories/products_repo.py
from dataclasses import dataclass
from typing import Optional
import sqlite3
from contextlib import contextmanager


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (toast/snackbar)."""
    pass


class OutOfStock(DomainError):
    def __init__(self, product_name: str, requested: int, available: int):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough stock for {product_name}: requested {requested}, available {available}"
        )


@dataclass
class Product:
    product_id: int | None
    sku: str | None
    name: str
    category: str | None
    price: float            # tax-inclusive
    cost: float
    stock_quantity: int
    min_stock_level: int
    is_active: bool = True
    created_at: str | None = None


_COLUMNS = (
    "product_id, sku, name, category, CAST(price AS REAL) AS price, "
    "CAST(cost AS REAL) AS cost, stock_quantity, min_stock_level, is_active, created_at"
)


def _to_product(r: sqlite3.Row) -> Product:
    d = dict(r)
    d["is_active"] = bool(d["is_active"])
    return Product(**d)


class ProductsRepo:
    """
    Catalog reads plus the stock bookkeeping a sale needs.

    Product/category management screens are outside this app; `create`
    exists for seeding and tests.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        # Use Row for named access; we normalize to dataclasses where we return them.
        self.conn.row_factory = sqlite3.Row

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def _immediate_tx(self):
        """
        Start an IMMEDIATE transaction (write lock once first write happens),
        commit on success, rollback on error.
        """
        cur = self.conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cur.close()

    # ---------------------------- Reads ----------------------------

    def list_products(self) -> list[Product]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products ORDER BY stock_quantity ASC, product_id"
        ).fetchall()
        return [_to_product(r) for r in rows]

    def list_sellable(self) -> list[Product]:
        """Active products with stock on hand (what the cashier can ring up)."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products "
            "WHERE is_active = 1 AND stock_quantity > 0 "
            "ORDER BY name"
        ).fetchall()
        return [_to_product(r) for r in rows]

    def get(self, product_id: int) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return _to_product(r) if r else None

    # ---------------------------- Writes ----------------------------

    def create(
        self,
        name: str,
        price: float,
        *,
        sku: Optional[str] = None,
        category: Optional[str] = None,
        cost: float = 0.0,
        stock_quantity: int = 0,
        min_stock_level: int = 0,
    ) -> int:
        if price < 0:
            raise DomainError("Price must be >= 0.")
        with self._immediate_tx():
            cur = self.conn.execute(
                "INSERT INTO products(sku, name, category, price, cost, stock_quantity, min_stock_level) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (sku, name, category, price, cost, stock_quantity, min_stock_level),
            )
            return int(cur.lastrowid)

    def take_stock(self, product_id: int, qty: int) -> None:
        """
        Decrement stock by `qty` inside the caller's transaction.
        Raises OutOfStock instead of letting stock go negative.
        """
        cur = self.conn.execute(
            "UPDATE products SET stock_quantity = stock_quantity - ? "
            "WHERE product_id = ? AND stock_quantity >= ?",
            (qty, product_id, qty),
        )
        if cur.rowcount == 0:
            p = self.get(product_id)
            if p is None:
                raise DomainError(f"Unknown product: {product_id}")
            raise OutOfStock(p.name, qty, p.stock_quantity)

    def return_stock(self, product_id: int, qty: int) -> None:
        self.conn.execute(
            "UPDATE products SET stock_quantity = stock_quantity + ? WHERE product_id = ?",
            (qty, product_id),
        )
