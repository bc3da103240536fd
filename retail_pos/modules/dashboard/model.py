# retail_pos/modules/dashboard/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ...constants import LOW_STOCK_THRESHOLD
from ...database import Store
from ...database.repositories.dashboard_repo import DashboardRepo
from ...database.repositories.products_repo import ProductsRepo
from ...errors import ValidationError
from ...utils.validators import require_iso_date


# --------------------------- Period helpers ---------------------------

@dataclass(frozen=True)
class DateRange:
    date_from: str  # ISO yyyy-mm-dd, inclusive
    date_to: str    # ISO yyyy-mm-dd, inclusive

    @classmethod
    def of(cls, date_from, date_to) -> "DateRange":
        start = require_iso_date(date_from, "Start date")
        end = require_iso_date(date_to, "End date")
        if start > end:
            raise ValidationError("Start date must not be after end date.")
        return cls(start, end)


def resolve_period(
    key: str,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    *,
    today: Optional[date] = None,
) -> DateRange:
    """Resolve a friendly period key to a concrete (date_from, date_to)."""
    today = today or date.today()
    iso_today = today.isoformat()
    k = (key or "today").lower()

    if k == "today":
        return DateRange(iso_today, iso_today)
    if k == "mtd":
        return DateRange(date(today.year, today.month, 1).isoformat(), iso_today)
    if k in ("last7", "7d"):
        return DateRange((today - timedelta(days=6)).isoformat(), iso_today)  # inclusive
    if k == "custom":
        if not (date_from and date_to):
            raise ValidationError("A custom period needs both start and end dates.")
        return DateRange.of(date_from, date_to)

    raise ValidationError(f"Unknown period {key!r}.")


# --------------------------- Dashboard Model ---------------------------

@dataclass
class DashboardModel:
    """
    Pulls the four aggregates from DashboardRepo for one date range.

    Usage:
        model = DashboardModel(store)
        model.refresh(DateRange.of("2025-01-01", "2025-01-31"))
        model.as_dict()

    All aggregates are independent reads; order does not matter.
    """

    store: Store
    repo: DashboardRepo = field(init=False)
    products: ProductsRepo = field(init=False)

    date_from: str = field(init=False, default="")
    date_to: str = field(init=False, default="")

    summary: Dict[str, Any] = field(default_factory=dict)
    top_products: List[Dict[str, Any]] = field(default_factory=list)
    daily_revenue: List[Dict[str, Any]] = field(default_factory=list)
    payment_methods: List[Dict[str, Any]] = field(default_factory=list)
    low_stock: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.repo = DashboardRepo(self.store)
        self.products = ProductsRepo(self.store)

    def refresh(self, period: DateRange, *, low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> "DashboardModel":
        self.date_from, self.date_to = period.date_from, period.date_to
        # one snapshot: no sale may land between the sections
        with self.store.lock:
            self.summary = self.repo.summary(self.date_from, self.date_to)
            self.top_products = self.repo.top_products(self.date_from, self.date_to)
            self.daily_revenue = self.repo.daily_revenue(self.date_from, self.date_to)
            self.payment_methods = self.repo.payment_methods(self.date_from, self.date_to)
            low = self.products.low_stock(low_stock_threshold)
        self.low_stock = [{"product_id": p.product_id, "name": p.name, "stock": p.stock} for p in low]
        return self

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date_from": self.date_from,
            "date_to": self.date_to,
            "summary": dict(self.summary),
            "top_products": list(self.top_products),
            "daily_revenue": list(self.daily_revenue),
            "payment_methods": list(self.payment_methods),
            "low_stock": list(self.low_stock),
        }
