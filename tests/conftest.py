# kasir/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets a fresh in-memory DB with schema + default settings
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - Catalog fixtures use tax-inclusive prices
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import sqlite3

import pytest

# Run Qt headless when no display is available (CI / containers).
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from kasir.database import get_connection
from kasir.database.repositories import ProductsRepo

SALE_DATE = "2025-01-15"


# ---------- Per-test database ----------
@pytest.fixture()
def conn():
    con = get_connection(":memory:")
    try:
        yield con
    finally:
        con.close()


# ---------- Catalog ----------
@pytest.fixture()
def products(conn: sqlite3.Connection) -> dict:
    """Three products; 'kopi' is the 111000 reference price (100000 DPP)."""
    repo = ProductsRepo(conn)
    ids = {
        "kopi": repo.create("Kopi Arabika 1kg", 111000.0, sku="KOP-001", category="Minuman",
                            cost=80000.0, stock_quantity=10, min_stock_level=2),
        "teh": repo.create("Teh Melati", 22200.0, sku="TEH-001", category="Minuman",
                           cost=15000.0, stock_quantity=50, min_stock_level=5),
        "gula": repo.create("Gula Pasir 1kg", 16650.0, sku="GUL-001",
                            cost=12000.0, stock_quantity=1),
    }
    return {key: repo.get(pid) for key, pid in ids.items()}


@pytest.fixture()
def sale_date() -> str:
    return SALE_DATE


@pytest.fixture()
def stock_of(conn: sqlite3.Connection):
    """Current stock_quantity for a product id."""
    def one(product_id: int) -> int:
        return int(conn.execute(
            "SELECT stock_quantity FROM products WHERE product_id=?", (product_id,)
        ).fetchone()[0])
    return one
