# retail_pos/database/repositories/sales_repo.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional
import logging
import sqlite3

from .. import Store, locked
from ...constants import STATUS_CANCELLED, STATUS_COMPLETED
from ...errors import (
    PurgeError,
    SaleCancellationError,
    SaleNotFoundError,
    SaleRegistrationError,
)
from ...utils.helpers import day_bounds, timestamp_str

_log = logging.getLogger(__name__)


@dataclass
class SaleItem:
    product_id: int | None
    product_name: str
    quantity: int
    unit_price: float
    item_id: int | None = None
    sale_id: int | None = None

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_price, 2)


@dataclass
class Sale:
    sale_id: int
    sold_at: str
    total: float
    payment_method: str
    status: str
    amount_received: float | None
    change_due: float | None
    items: list[SaleItem] = field(default_factory=list)

    @property
    def is_cancelled(self) -> bool:
        return self.status == STATUS_CANCELLED

    @property
    def items_count(self) -> int:
        return sum(it.quantity for it in self.items)

    def as_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "sold_at": self.sold_at,
            "total": self.total,
            "payment_method": self.payment_method,
            "status": self.status,
            "amount_received": self.amount_received,
            "change_due": self.change_due,
            "items": [
                {
                    "item_id": it.item_id,
                    "product_id": it.product_id,
                    "product_name": it.product_name,
                    "quantity": it.quantity,
                    "unit_price": it.unit_price,
                }
                for it in self.items
            ],
        }


_HEADER_SELECT = """
    SELECT s.sale_id, s.sold_at,
           CAST(s.total AS REAL) AS total,
           s.payment_method, s.status,
           s.amount_received, s.change_due
    FROM sales s
"""

_ITEM_SELECT = """
    SELECT si.item_id, si.sale_id, si.product_id, si.product_name,
           CAST(si.quantity AS INTEGER) AS quantity,
           CAST(si.unit_price AS REAL)  AS unit_price
    FROM sale_items si
"""


class SalesRepo:
    """
    Sale transaction engine.

    Key behavior:
      - create_sale() writes the header, every line item and every stock
        decrement in ONE immediate transaction; any failure leaves no trace.
      - Line items copy name/price from the cart and are never rewritten.
      - cancel_sale() flips status to 'cancelled' and gives back stock for
        items whose product still exists, also in one transaction.
      - purge_history() removes sales (items cascade) and never touches stock.
    """

    def __init__(self, store: Store):
        self.store = store

    @property
    def conn(self) -> sqlite3.Connection:
        return self.store.conn

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    @locked
    def get_sale(self, sale_id: int) -> Sale | None:
        r = self.conn.execute(_HEADER_SELECT + " WHERE s.sale_id=?", (sale_id,)).fetchone()
        if r is None:
            return None
        sale = Sale(**r)
        sale.items = self.list_items(sale_id)
        return sale

    @locked
    def list_items(self, sale_id: int) -> list[SaleItem]:
        rows = self.conn.execute(
            _ITEM_SELECT + " WHERE si.sale_id=? ORDER BY si.item_id",
            (sale_id,),
        ).fetchall()
        return [SaleItem(**r) for r in rows]

    @locked
    def list_sales(self) -> list[Sale]:
        """All sales, newest first, each with its items."""
        return self._with_items(
            self.conn.execute(
                _HEADER_SELECT + " ORDER BY s.sold_at DESC, s.sale_id DESC"
            ).fetchall()
        )

    @locked
    def search_sales(
        self,
        date_from: str | None = None,
        date_to: str | None = None,
        *,
        status: Optional[str] = None,
    ) -> list[Sale]:
        """
        Sales whose local date falls in [date_from, date_to] (either bound optional).
        """
        where: list[str] = []
        params: list = []
        if date_from:
            lo, _ = day_bounds(date_from, date_from)
            where.append("s.sold_at >= ?")
            params.append(lo)
        if date_to:
            _, hi = day_bounds(date_to, date_to)
            where.append("s.sold_at < ?")
            params.append(hi)
        if status:
            where.append("s.status = ?")
            params.append(status)

        sql = _HEADER_SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY s.sold_at DESC, s.sale_id DESC"
        return self._with_items(self.conn.execute(sql, params).fetchall())

    def _with_items(self, header_rows: list[sqlite3.Row]) -> list[Sale]:
        sales = [Sale(**r) for r in header_rows]
        if not sales:
            return sales
        by_id = {s.sale_id: s for s in sales}
        placeholders = ",".join("?" for _ in by_id)
        rows = self.conn.execute(
            _ITEM_SELECT + f" WHERE si.sale_id IN ({placeholders}) ORDER BY si.item_id",
            list(by_id),
        ).fetchall()
        for r in rows:
            by_id[r["sale_id"]].items.append(SaleItem(**r))
        return sales

    # ---------------------------------------------------------------------
    # INTERNAL WRITES (always inside a transaction)
    # ---------------------------------------------------------------------
    def _insert_header(
        self,
        conn: sqlite3.Connection,
        *,
        sold_at: str,
        total: float,
        payment_method: str,
        amount_received: float | None,
        change_due: float | None,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO sales (sold_at, total, payment_method, status, amount_received, change_due)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (sold_at, total, payment_method, STATUS_COMPLETED, amount_received, change_due),
        )
        return int(cur.lastrowid)

    def _insert_item(self, conn: sqlite3.Connection, sale_id: int, it: SaleItem) -> int:
        cur = conn.execute(
            """
            INSERT INTO sale_items (sale_id, product_id, product_name, quantity, unit_price)
            VALUES (?, ?, ?, ?, ?)
            """,
            (sale_id, it.product_id, it.product_name, it.quantity, it.unit_price),
        )
        return int(cur.lastrowid)

    def _adjust_stock(self, conn: sqlite3.Connection, product_id: int, delta: int) -> None:
        conn.execute(
            "UPDATE products SET stock = stock + ? WHERE product_id = ?",
            (delta, product_id),
        )

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def create_sale(
        self,
        items: Iterable[SaleItem],
        payment_method: str,
        total: float,
        amount_received: float | None = None,
        change_due: float | None = None,
    ) -> int:
        """
        Record a completed sale and take its quantities out of stock.

        The total is the caller's (subtotal minus discount) and is stored
        as given. Raises SaleRegistrationError on any store failure; in that
        case neither the sale nor any stock change was persisted.
        """
        sold_at = timestamp_str(self.store.clock())
        try:
            with self.store.transaction() as conn:
                sale_id = self._insert_header(
                    conn,
                    sold_at=sold_at,
                    total=total,
                    payment_method=payment_method,
                    amount_received=amount_received,
                    change_due=change_due,
                )
                for it in items:
                    it.sale_id = sale_id
                    it.item_id = self._insert_item(conn, sale_id, it)
                    if it.product_id is not None:
                        self._adjust_stock(conn, it.product_id, -it.quantity)
        except (sqlite3.Error, OSError) as e:
            _log.error("Sale registration rolled back: %s", e)
            raise SaleRegistrationError(
                f"The sale was not recorded: {e}", cause=e
            ) from e
        return sale_id

    def cancel_sale(self, sale_id: int) -> bool:
        """
        Mark a completed sale cancelled and restore stock for items whose
        product still exists.

        Returns False (and changes nothing) when the sale is already
        cancelled, so stock is never restored twice.
        """
        try:
            with self.store.transaction() as conn:
                row = conn.execute(
                    "SELECT status FROM sales WHERE sale_id=?", (sale_id,)
                ).fetchone()
                if row is None:
                    raise SaleNotFoundError(f"Sale {sale_id} does not exist.")
                if row["status"] == STATUS_CANCELLED:
                    return False

                conn.execute(
                    "UPDATE sales SET status=? WHERE sale_id=?",
                    (STATUS_CANCELLED, sale_id),
                )
                items = conn.execute(
                    "SELECT product_id, quantity FROM sale_items "
                    "WHERE sale_id=? AND product_id IS NOT NULL",
                    (sale_id,),
                ).fetchall()
                for it in items:
                    self._adjust_stock(conn, int(it["product_id"]), int(it["quantity"]))
        except (sqlite3.Error, OSError) as e:
            _log.error("Sale cancellation rolled back: %s", e)
            raise SaleCancellationError(
                f"Sale {sale_id} could not be cancelled: {e}", cause=e
            ) from e
        return True

    def purge_history(self) -> int:
        """Delete every sale (items cascade). Current stock is left alone."""
        try:
            with self.store.transaction() as conn:
                cur = conn.execute("DELETE FROM sales")
                return int(cur.rowcount)
        except (sqlite3.Error, OSError) as e:
            raise PurgeError(f"Sales history could not be cleared: {e}", cause=e) from e
