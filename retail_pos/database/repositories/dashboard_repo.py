# retail_pos/database/repositories/dashboard_repo.py
from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from .. import Store, locked
from ...constants import STATUS_COMPLETED, TOP_PRODUCTS_LIMIT
from ...utils.helpers import day_bounds


def _to_float(x: Optional[Any]) -> float:
    try:
        return float(x or 0.0)
    except (TypeError, ValueError):
        return 0.0


class DashboardRepo:
    """
    Thin read-only query layer for the dashboard.

    Every method takes an inclusive local-date range (ISO 'YYYY-MM-DD') and
    only counts sales with status 'completed'.

    Performance note:
    - sold_at is compared directly (sold_at >= start AND sold_at < end+1day)
      so SQLite can use idx_sales_sold_at; no DATE(sold_at) in filters.
    - No SQLite clock (DATE('now')) inside filters; the caller passes dates.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    @property
    def conn(self) -> sqlite3.Connection:
        return self.store.conn

    def _bounds(self, date_from: str, date_to: str) -> Tuple[str, str, str]:
        lo, hi = day_bounds(date_from, date_to)
        return STATUS_COMPLETED, lo, hi

    # ----------------------------- KPIs -----------------------------

    @locked
    def summary(self, date_from: str, date_to: str) -> Dict[str, Any]:
        """
        {sales_count, revenue, average_ticket}; average_ticket is 0.0 for an
        empty range.
        """
        sql = """
            SELECT COUNT(s.sale_id)                           AS sales_count,
                   COALESCE(SUM(CAST(s.total AS REAL)), 0.0)  AS revenue
            FROM sales s
            WHERE s.status = ?
              AND s.sold_at >= ? AND s.sold_at < ?
        """
        r = self.conn.execute(sql, self._bounds(date_from, date_to)).fetchone()
        count = int(r["sales_count"] or 0)
        revenue = _to_float(r["revenue"])
        return {
            "sales_count": count,
            "revenue": round(revenue, 2),
            "average_ticket": round(revenue / count, 2) if count > 0 else 0.0,
        }

    @locked
    def top_products(
        self, date_from: str, date_to: str, limit: int = TOP_PRODUCTS_LIMIT
    ) -> List[Dict[str, Any]]:
        """
        Units sold per product name. Uses the name copied onto the line item,
        so products deleted since still show up. Ties keep SQLite's order.
        """
        sql = """
            SELECT si.product_name             AS name,
                   SUM(CAST(si.quantity AS INTEGER)) AS units
            FROM sale_items si
            JOIN sales s ON s.sale_id = si.sale_id
            WHERE s.status = ?
              AND s.sold_at >= ? AND s.sold_at < ?
            GROUP BY si.product_name
            ORDER BY units DESC
            LIMIT ?
        """
        rows = self.conn.execute(sql, (*self._bounds(date_from, date_to), int(limit))).fetchall()
        return [{"name": r["name"], "quantity": int(r["units"] or 0)} for r in rows]

    @locked
    def daily_revenue(self, date_from: str, date_to: str) -> List[Dict[str, Any]]:
        """Revenue per calendar day, ascending; days without sales are absent."""
        sql = """
            SELECT substr(s.sold_at, 1, 10)                  AS day,
                   COALESCE(SUM(CAST(s.total AS REAL)), 0.0) AS revenue
            FROM sales s
            WHERE s.status = ?
              AND s.sold_at >= ? AND s.sold_at < ?
            GROUP BY day
            ORDER BY day ASC
        """
        rows = self.conn.execute(sql, self._bounds(date_from, date_to)).fetchall()
        return [{"day": r["day"], "revenue": round(_to_float(r["revenue"]), 2)} for r in rows]

    @locked
    def payment_methods(self, date_from: str, date_to: str) -> List[Dict[str, Any]]:
        """
        Completed sales per payment method. The stored value is trimmed and
        lower-cased before grouping so free-form rows from older releases
        ("Pix", " PIX ") land in one bucket.
        """
        sql = """
            SELECT LOWER(TRIM(s.payment_method)) AS payment_method,
                   COUNT(s.sale_id)              AS sales_count
            FROM sales s
            WHERE s.status = ?
              AND s.sold_at >= ? AND s.sold_at < ?
            GROUP BY LOWER(TRIM(s.payment_method))
            ORDER BY sales_count DESC, payment_method ASC
        """
        rows = self.conn.execute(sql, self._bounds(date_from, date_to)).fetchall()
        return [{"payment_method": r["payment_method"], "count": int(r["sales_count"])} for r in rows]
