# retail_pos/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from .. import Store, locked
from ...errors import ProductNotFoundError
from ._integrity import translate_integrity_error


@dataclass
class Product:
    product_id: int | None
    name: str
    price: float
    stock: int
    image: str | None = None
    barcode: str | None = None
    category_id: int | None = None
    category_name: str | None = None


_SELECT = """
    SELECT p.product_id, p.name,
           CAST(p.price AS REAL)    AS price,
           CAST(p.stock AS INTEGER) AS stock,
           p.image, p.barcode, p.category_id,
           c.name AS category_name
    FROM products p
    LEFT JOIN categories c ON c.category_id = p.category_id
"""


class ProductsRepo:
    """
    Catalog rows. Stock is only changed here by direct edits; sales and
    cancellations adjust it inside their own transactions (see SalesRepo).
    """

    def __init__(self, store: Store):
        self.store = store

    @property
    def conn(self) -> sqlite3.Connection:
        return self.store.conn

    # ---------------------------- Reads ----------------------------

    @locked
    def list_products(self) -> list[Product]:
        rows = self.conn.execute(_SELECT + " ORDER BY p.name ASC, p.product_id ASC").fetchall()
        return [Product(**r) for r in rows]

    @locked
    def get(self, product_id: int) -> Product | None:
        r = self.conn.execute(_SELECT + " WHERE p.product_id=?", (product_id,)).fetchone()
        return Product(**r) if r else None

    @locked
    def find_by_barcode(self, barcode: str) -> Product | None:
        """Scan-to-add lookup; a miss is None, not an error."""
        r = self.conn.execute(_SELECT + " WHERE p.barcode=?", (barcode,)).fetchone()
        return Product(**r) if r else None

    @locked
    def low_stock(self, threshold: int) -> list[Product]:
        rows = self.conn.execute(
            _SELECT + " WHERE p.stock <= ? ORDER BY p.stock ASC, p.name ASC",
            (threshold,),
        ).fetchall()
        return [Product(**r) for r in rows]

    # ---------------------------- Writes ----------------------------

    def create(
        self,
        name: str,
        price: float,
        stock: int,
        image: str | None = None,
        barcode: str | None = None,
        category_id: int | None = None,
    ) -> int:
        try:
            with self.store.transaction() as conn:
                cur = conn.execute(
                    "INSERT INTO products(name, price, stock, image, barcode, category_id) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (name, price, stock, image, barcode, category_id),
                )
                return int(cur.lastrowid)
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def update(
        self,
        product_id: int,
        name: str,
        price: float,
        stock: int,
        image: str | None = None,
        barcode: str | None = None,
        category_id: int | None = None,
    ) -> None:
        try:
            with self.store.transaction() as conn:
                cur = conn.execute(
                    "UPDATE products "
                    "SET name=?, price=?, stock=?, image=?, barcode=?, category_id=? "
                    "WHERE product_id=?",
                    (name, price, stock, image, barcode, category_id, product_id),
                )
                if cur.rowcount == 0:
                    raise ProductNotFoundError(f"Product {product_id} does not exist.")
        except sqlite3.IntegrityError as e:
            raise translate_integrity_error(e) from e

    def delete(self, product_id: int) -> Product:
        """
        Remove the product row. sale_items.product_id is cleared by the
        ON DELETE SET NULL action; the items themselves stay.
        Returns the deleted row so the caller can release its image.
        """
        with self.store.transaction() as conn:
            r = conn.execute(_SELECT + " WHERE p.product_id=?", (product_id,)).fetchone()
            if r is None:
                raise ProductNotFoundError(f"Product {product_id} does not exist.")
            conn.execute("DELETE FROM products WHERE product_id=?", (product_id,))
        return Product(**r)
