# retail_pos/modules/sales/controller.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional
import logging

from ...constants import STATUS_CANCELLED
from ...database import Store
from ...database.repositories.sales_repo import Sale, SaleItem, SalesRepo
from ...errors import SaleNotFoundError, ValidationError
from ...utils.helpers import to_cents
from ...utils.loggers import log_event
from ...utils.validators import (
    optional_id,
    require_non_negative_float,
    require_iso_date,
    require_positive_int,
    require_text,
)
from .payments import PaymentMethod

_log = logging.getLogger(__name__)

REPORT_ALL = "all"
REPORT_CANCELLED = "cancelled"


@dataclass
class RegisteredSale:
    sale_id: int
    total: float
    payment_method: str
    change_due: float | None
    receipt: Any = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class SalesReport:
    sales: list[Sale]
    revenue: float
    sales_count: int
    items_count: int


def _item_from(raw: SaleItem | Mapping[str, Any]) -> SaleItem:
    """
    Accept either a SaleItem or the cart payload shape
    {id|product_id, name|product_name, quantity, price|unit_price}.
    """
    if isinstance(raw, SaleItem):
        product_id, name, qty, price = raw.product_id, raw.product_name, raw.quantity, raw.unit_price
    elif isinstance(raw, Mapping):
        product_id = raw.get("product_id", raw.get("id"))
        name = raw.get("product_name", raw.get("name"))
        qty = raw.get("quantity")
        price = raw.get("unit_price", raw.get("price"))
    else:
        raise ValidationError("Each sale item must be a mapping or SaleItem.")
    return SaleItem(
        product_id=optional_id(product_id, "Product id"),
        product_name=require_text(name, "Item name"),
        quantity=require_positive_int(qty, "Quantity"),
        unit_price=require_non_negative_float(price, "Unit price"),
    )


class SalesController:
    """
    Boundary for the sale engine: validates and normalises input, calls the
    repository, and hands the committed sale to the receipt collaborator.
    """

    def __init__(self, store: Store, receipts=None):
        self.store = store
        self.repo = SalesRepo(store)
        self.receipts = receipts

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------
    def register_sale(
        self,
        items: Iterable[SaleItem | Mapping[str, Any]],
        payment_method,
        total,
        amount_received=None,
        change_due=None,
        *,
        receipt_width: Optional[int] = None,
    ) -> RegisteredSale:
        method = PaymentMethod.parse(payment_method)
        sale_items = [_item_from(it) for it in (items or [])]
        if not sale_items:
            raise ValidationError("The cart is empty.")
        # Total and unit prices are stored exactly as the cart sent them.
        total_v = require_non_negative_float(total, "Total")

        # Cash without an amount received keeps both cash columns NULL.
        received: float | None = None
        change: float | None = None
        if method is PaymentMethod.CASH and amount_received not in (None, ""):
            received = require_non_negative_float(amount_received, "Amount received")
            if received < total_v:
                raise ValidationError("Amount received is less than the total.")
            if change_due is None or change_due == "":
                change = to_cents(received - total_v)
            else:
                change = require_non_negative_float(change_due, "Change")

        sale_id = self.repo.create_sale(
            sale_items,
            method.value,
            total_v,
            amount_received=received,
            change_due=change,
        )
        log_event(
            _log, "sale", "registered", f"Sale #{sale_id} registered",
            {"sale_id": sale_id, "total": total_v, "payment_method": method.value,
             "items": len(sale_items)},
        )

        result = RegisteredSale(
            sale_id=sale_id,
            total=total_v,
            payment_method=method.value,
            change_due=change,
        )
        self._dispatch_receipt(result, receipt_width)
        return result

    def _dispatch_receipt(self, result: RegisteredSale, width: Optional[int]) -> None:
        """Runs after commit; a failure here is a warning on an already valid sale."""
        if self.receipts is None:
            return
        try:
            sale = self.repo.get_sale(result.sale_id)
            result.receipt = self.receipts.generate(sale, width=width)
        except Exception as e:
            msg = f"Sale #{result.sale_id} saved, but its receipt could not be generated: {e}"
            log_event(_log, "receipt", "failed", msg, {"sale_id": result.sale_id}, level=logging.WARNING)
            result.warnings.append(msg)

    # ------------------------------------------------------------------
    # Cancellation / purge
    # ------------------------------------------------------------------
    def cancel_sale(self, sale_id) -> bool:
        """
        True when the sale was cancelled now, False when it already was.
        """
        sid = require_positive_int(sale_id, "Sale id")
        changed = self.repo.cancel_sale(sid)
        if changed:
            log_event(_log, "sale", "cancelled", f"Sale #{sid} cancelled", {"sale_id": sid})
        else:
            _log.info("Sale #%s was already cancelled; nothing to do", sid)
        return changed

    def purge_history(self) -> int:
        """Irreversible; confirmation is the caller's job."""
        n = self.repo.purge_history()
        log_event(_log, "sale", "purged", f"Sales history cleared ({n} sales)", {"deleted": n},
                  level=logging.WARNING)
        return n

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_sale(self, sale_id) -> Sale:
        sid = require_positive_int(sale_id, "Sale id")
        sale = self.repo.get_sale(sid)
        if sale is None:
            raise SaleNotFoundError(f"Sale {sid} does not exist.")
        return sale

    def list_sales(self) -> list[Sale]:
        return self.repo.list_sales()

    def sales_report(
        self,
        date_from: str | None = None,
        date_to: str | None = None,
        report_filter: str = REPORT_ALL,
    ) -> SalesReport:
        """
        Sales in a date range filtered by:
          - 'all'        every non-cancelled sale
          - 'cancelled'  cancelled sales only (revenue reported as 0)
          - a payment method (any spelling PaymentMethod.parse accepts),
            non-cancelled only
        """
        if date_from:
            date_from = require_iso_date(date_from, "Start date")
        if date_to:
            date_to = require_iso_date(date_to, "End date")
        flt = (report_filter or REPORT_ALL).strip().lower()
        sales = self.repo.search_sales(date_from, date_to)

        if flt == REPORT_CANCELLED:
            picked = [s for s in sales if s.status == STATUS_CANCELLED]
            revenue = 0.0
        else:
            picked = [s for s in sales if s.status != STATUS_CANCELLED]
            if flt != REPORT_ALL:
                wanted = PaymentMethod.parse(flt)
                picked = [s for s in picked if PaymentMethod.parse(s.payment_method or "other") is wanted]
            revenue = to_cents(sum(s.total for s in picked))

        return SalesReport(
            sales=picked,
            revenue=revenue,
            sales_count=len(picked),
            items_count=sum(s.items_count for s in picked),
        )
