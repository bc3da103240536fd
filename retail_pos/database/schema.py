# retail_pos/database/schema.py
from __future__ import annotations

from pathlib import Path
import logging
import sqlite3
import sys

from ..constants import SCHEMA_VERSION
from ..utils.loggers import log_event
from . import versioning

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* -------- catalog -------- */
CREATE TABLE IF NOT EXISTS categories (
    category_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS products (
    product_id  INTEGER PRIMARY KEY AUTOINCREMENT,
    name        TEXT    NOT NULL,
    price       REAL    NOT NULL CHECK (price >= 0),
    stock       INTEGER NOT NULL CHECK (stock >= 0),
    image       TEXT,
    barcode     TEXT,
    category_id INTEGER REFERENCES categories(category_id) ON DELETE SET NULL
);

/* -------- sales -------- */
CREATE TABLE IF NOT EXISTS sales (
    sale_id         INTEGER PRIMARY KEY AUTOINCREMENT,
    sold_at         TEXT NOT NULL,              /* local time 'YYYY-MM-DD HH:MM:SS' */
    total           REAL NOT NULL,
    payment_method  TEXT NOT NULL,
    status          TEXT NOT NULL DEFAULT 'completed'
                    CHECK (status IN ('completed','cancelled')),
    amount_received REAL,                       /* cash only */
    change_due      REAL                        /* cash only */
);

/* line items keep a copy of name/price; product_id is cleared when the product goes */
CREATE TABLE IF NOT EXISTS sale_items (
    item_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    sale_id      INTEGER NOT NULL,
    product_id   INTEGER,
    product_name TEXT    NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity > 0),
    unit_price   REAL    NOT NULL,
    FOREIGN KEY (sale_id)    REFERENCES sales(sale_id)       ON DELETE CASCADE,
    FOREIGN KEY (product_id) REFERENCES products(product_id) ON DELETE SET NULL
);
"""

# Created after column backfill: older files may lack the indexed columns.
INDEXES_SQL = r"""
CREATE INDEX IF NOT EXISTS idx_sales_sold_at            ON sales(sold_at);
CREATE INDEX IF NOT EXISTS idx_sale_items_sale_id       ON sale_items(sale_id);
CREATE INDEX IF NOT EXISTS idx_sale_items_product_id    ON sale_items(product_id);
CREATE INDEX IF NOT EXISTS idx_products_category_id     ON products(category_id);
CREATE UNIQUE INDEX IF NOT EXISTS idx_products_barcode  ON products(barcode);
"""

# (table, column, DDL fragment) added to databases created by earlier releases.
# Added columns must default to NULL or a constant.
ADDITIVE_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("products", "image", "TEXT"),
    ("products", "barcode", "TEXT"),
    ("products", "category_id", "INTEGER REFERENCES categories(category_id) ON DELETE SET NULL"),
    ("sales", "status", "TEXT NOT NULL DEFAULT 'completed'"),
    ("sales", "amount_received", "REAL"),
    ("sales", "change_due", "REAL"),
)


def table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    cur = conn.execute(f"PRAGMA table_info({table});")
    return {row[1] for row in cur.fetchall()}  # row[1] = name


def _ensure_columns(conn: sqlite3.Connection) -> list[str]:
    """
    Safe migration for older DBs created before later columns existed.
    Only ever adds; never drops or renames. Returns the columns added.
    """
    added: list[str] = []
    cache: dict[str, set[str]] = {}
    for table, column, ddl in ADDITIVE_COLUMNS:
        cols = cache.setdefault(table, table_columns(conn, table))
        if column not in cols:
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl};")
            cols.add(column)
            added.append(f"{table}.{column}")
    return added


def apply_schema(conn: sqlite3.Connection) -> list[str]:
    """
    Idempotently create tables, backfill missing columns, create indexes and
    stamp the schema version. Safe to run on every startup.
    """
    conn.executescript(SQL)
    added = _ensure_columns(conn)
    conn.executescript(INDEXES_SQL)
    if versioning.get_current_version(conn) != SCHEMA_VERSION:
        versioning.set_current_version(conn, SCHEMA_VERSION)
    if added:
        log_event(_log, "schema", "migrated", "Schema migrated, added columns: " + ", ".join(added),
                  {"columns": added, "version": SCHEMA_VERSION})
    return added


def init_schema(db_path: Path | str) -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, isolation_level=None)
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
    finally:
        conn.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        raise SystemExit("usage: python -m retail_pos.database.schema <db-path>")
    init_schema(sys.argv[1])
    print(f"DB applied to {sys.argv[1]}")
