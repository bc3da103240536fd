# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own temp-file SQLite DB opened through open_store,
#   so schema + migration run exactly as in production.
# - Time is fixed: sales are stamped by FakeClock, never the wall clock.
# - Handy builders for products and cart lines.
# ---------------------------------------------------------------------
from __future__ import annotations

from datetime import datetime

import pytest

from retail_pos.database import open_store
from retail_pos.modules.catalog import CatalogController
from retail_pos.modules.sales import SalesController

FIXED_NOW = datetime(2025, 3, 14, 10, 30, 0)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, stamp: str) -> None:
        """'YYYY-MM-DD HH:MM:SS'"""
        self.now = datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S")


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "pdv-database.db"


@pytest.fixture()
def store(db_path, clock):
    st = open_store(db_path, clock=clock)
    try:
        yield st
    finally:
        st.close()


@pytest.fixture()
def catalog(store):
    return CatalogController(store)


@pytest.fixture()
def sales(store):
    return SalesController(store)


@pytest.fixture()
def make_product(catalog):
    def _make(name="Widget", price=10.0, stock=10, **extra):
        return catalog.add_product({"name": name, "price": price, "stock": stock, **extra})
    return _make


@pytest.fixture()
def line():
    """Cart payload for one product, shaped like the UI sends it."""
    def _line(product, quantity=1, price=None):
        return {
            "id": product.product_id,
            "name": product.name,
            "quantity": quantity,
            "price": product.price if price is None else price,
        }
    return _line


@pytest.fixture()
def stock_of(store):
    def _stock(product_id):
        row = store.conn.execute(
            "SELECT stock FROM products WHERE product_id=?", (product_id,)
        ).fetchone()
        return None if row is None else int(row["stock"])
    return _stock


@pytest.fixture()
def count_rows(store):
    def _count(table):
        return int(store.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])
    return _count
