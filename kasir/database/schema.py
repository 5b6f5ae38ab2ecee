from pathlib import Path
import sqlite3
import sys

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CORE TABLES ======================== */

/* -------- settings (key/value) -------- */
CREATE TABLE IF NOT EXISTS settings (
    key   TEXT PRIMARY KEY,
    value TEXT
);

/* -------- catalog -------- */
CREATE TABLE IF NOT EXISTS products (
    product_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    sku             TEXT UNIQUE,
    name            TEXT NOT NULL,
    category        TEXT,
    /* tax-inclusive selling price */
    price           NUMERIC NOT NULL CHECK (CAST(price AS REAL) >= 0),
    cost            NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(cost AS REAL) >= 0),
    stock_quantity  INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0),
    min_stock_level INTEGER NOT NULL DEFAULT 0,
    is_active       INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
    created_at      TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_products_name ON products(name);

/* ======================== SALES ======================== */

CREATE TABLE IF NOT EXISTS sales (
    sale_id          TEXT PRIMARY KEY,
    sale_number      TEXT UNIQUE NOT NULL,
    customer_name    TEXT,
    /* gross, tax-inclusive price x qty */
    subtotal         NUMERIC NOT NULL DEFAULT 0,
    tax_amount       NUMERIC NOT NULL DEFAULT 0,
    /* grand total from the pricing engine at creation / last edit */
    total_amount     NUMERIC NOT NULL DEFAULT 0 CHECK (CAST(total_amount AS REAL) >= 0),
    payment_method   TEXT NOT NULL CHECK (payment_method IN ('cash','card','transfer','credit')),
    payment_received NUMERIC NOT NULL DEFAULT 0,
    change_amount    NUMERIC NOT NULL DEFAULT 0,
    invoice_status   TEXT NOT NULL DEFAULT 'lunas'
                     CHECK (invoice_status IN ('lunas','dp','belum_bayar')),
    notes            TEXT,
    created_by       TEXT,
    created_at       TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_sales_created_at ON sales(created_at);

CREATE TABLE IF NOT EXISTS sale_items (
    item_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id    TEXT    NOT NULL,
    product_id INTEGER NOT NULL,
    quantity   INTEGER NOT NULL CHECK (quantity >= 1),
    unit_price NUMERIC NOT NULL CHECK (CAST(unit_price AS REAL) >= 0),
    /* percent, 0..100 */
    discount   NUMERIC NOT NULL DEFAULT 0
               CHECK (CAST(discount AS REAL) >= 0 AND CAST(discount AS REAL) <= 100),
    /* line total from the pricing engine */
    subtotal   NUMERIC NOT NULL DEFAULT 0,
    FOREIGN KEY (sale_id)    REFERENCES sales(sale_id) ON DELETE CASCADE,
    FOREIGN KEY (product_id) REFERENCES products(product_id)
);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale ON sale_items(sale_id);

/* ======================== STOCK ======================== */

CREATE TABLE IF NOT EXISTS stock_movements (
    movement_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id       INTEGER NOT NULL,
    transaction_type TEXT NOT NULL CHECK (transaction_type IN ('inbound','outbound','adjustment')),
    quantity         INTEGER NOT NULL,
    reference_number TEXT,
    notes            TEXT,
    created_by       TEXT,
    created_at       TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (product_id) REFERENCES products(product_id)
);
CREATE INDEX IF NOT EXISTS idx_stock_movements_ref ON stock_movements(reference_number);
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema to an open connection."""
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "kasir.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[2] / "data" / "kasir.db"
    init_schema(target)
    print(f"✓ DB applied to {target}")
