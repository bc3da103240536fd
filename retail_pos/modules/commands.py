# retail_pos/modules/commands.py
"""
Command surface: the request/response boundary a UI talks to.

Every command is one logical call returning a CommandResult; nothing
streams and nothing is partial. Commands run one at a time under the
store lock.

    app = PosApp.open(Settings.from_env())
    res = app.dispatch("registerSale", {"items": [...], "paymentMethod": "pix", "total": 25})
    if not res.ok:
        show(res.error)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional
import logging

from ..config import Settings
from ..database import Clock, Store, open_store
from ..errors import (
    ConstraintError,
    DomainError,
    NotFoundError,
    TransactionError,
    ValidationError,
)
from ..utils.validators import require_positive_int
from .activation import ActivationStore
from .catalog import CatalogController, stock_level
from .dashboard import DashboardModel, DateRange
from .images import ImageStore
from .receipts import ReceiptService
from .sales import SalesController

_log = logging.getLogger(__name__)


@dataclass
class CommandResult:
    ok: bool
    data: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _plain(obj: Any) -> Any:
    if hasattr(obj, "as_dict"):
        return obj.as_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, (list, tuple)):
        return [_plain(o) for o in obj]
    return obj


def _pick(data: Mapping[str, Any], *names: str, default=None):
    """First present key among camelCase/snake_case spellings."""
    for n in names:
        if n in data:
            return data[n]
    return default


class PosApp:
    """
    Owns the store handle and the collaborators for one session.
    Opened once at startup, closed once at shutdown.
    """

    COMMANDS: Dict[str, str] = {
        "listCategories": "list_categories",
        "addCategory": "add_category",
        "listProducts": "list_products",
        "addProduct": "add_product",
        "updateProduct": "update_product",
        "findByBarcode": "find_by_barcode",
        "deleteProduct": "delete_product",
        "saveImage": "save_image",
        "registerSale": "register_sale",
        "cancelSale": "cancel_sale",
        "listSales": "list_sales",
        "salesReport": "sales_report",
        "purgeHistory": "purge_history",
        "dashboardData": "dashboard_data",
    }

    def __init__(
        self,
        store: Store,
        *,
        images: Optional[ImageStore] = None,
        receipts: Optional[ReceiptService] = None,
        activation: Optional[ActivationStore] = None,
    ):
        self.store = store
        self.images = images
        self.receipts = receipts
        self.activation = activation
        self.catalog = CatalogController(store, images=images)
        self.sales = SalesController(store, receipts=receipts)

    @classmethod
    def open(
        cls,
        settings: Settings,
        *,
        clock: Clock = datetime.now,
        pdf_writer: Optional[Callable] = None,
    ) -> "PosApp":
        """Raises StoreUnavailableError if the database can't be opened."""
        settings.ensure_dirs()
        store = open_store(settings.db_path, clock=clock)
        receipts = (
            ReceiptService(settings.receipts_path, pdf_writer=pdf_writer)
            if pdf_writer is not None
            else ReceiptService(settings.receipts_path)
        )
        return cls(
            store,
            images=ImageStore(settings.images_path),
            receipts=receipts,
            activation=ActivationStore(settings.activation_path, settings.activation_secret),
        )

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "PosApp":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def is_activated(self) -> bool:
        return self.activation is not None and self.activation.is_activated()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(self, command: str, *args, **kwargs) -> CommandResult:
        attr = self.COMMANDS.get(command)
        if attr is None:
            return CommandResult(ok=False, error=f"Unknown command {command!r}.", error_type="UnknownCommand")
        handler = getattr(self, attr)
        try:
            with self.store.lock:
                out = handler(*args, **kwargs)
        except ValidationError as e:
            _log.debug("%s rejected: %s", command, e.message)
            return self._failure(e)
        except (ConstraintError, NotFoundError) as e:
            _log.info("%s refused: %s", command, e.message)
            return self._failure(e)
        except TransactionError as e:
            _log.error("%s failed and was rolled back: %s", command, e.message)
            return self._failure(e)
        except DomainError as e:
            _log.info("%s refused: %s", command, e.message)
            return self._failure(e)
        except Exception:
            _log.exception("%s failed unexpectedly", command)
            return CommandResult(ok=False, error="Operation failed.", error_type="InternalError")

        warnings: list[str] = []
        if isinstance(out, dict):
            warnings = list(out.pop("warnings", []) or [])
        return CommandResult(ok=True, data=out, warnings=warnings)

    @staticmethod
    def _failure(e: DomainError) -> CommandResult:
        return CommandResult(ok=False, error=e.message, error_type=type(e).__name__)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def list_categories(self):
        return _plain(self.catalog.list_categories())

    def add_category(self, name):
        return _plain(self.catalog.add_category(name))

    def _product_dict(self, p) -> dict:
        d = asdict(p)
        d["stock_level"] = stock_level(p.stock)
        path = self.catalog.image_path(p.image)
        d["image_path"] = str(path) if path else None
        return d

    def list_products(self):
        return [self._product_dict(p) for p in self.catalog.list_products()]

    def add_product(self, fields: Mapping[str, Any]):
        return self._product_dict(self.catalog.add_product(fields))

    def update_product(self, product_id, fields: Mapping[str, Any]):
        return self._product_dict(self.catalog.update_product(product_id, fields))

    def find_by_barcode(self, code):
        p = self.catalog.find_by_barcode(code)
        return None if p is None else self._product_dict(p)

    def delete_product(self, product_id):
        return self._product_dict(self.catalog.delete_product(product_id))

    def save_image(self, data, suggested_name: str):
        return self.catalog.save_image(data, suggested_name)

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------
    def register_sale(self, sale_data: Mapping[str, Any]):
        res = self.sales.register_sale(
            _pick(sale_data, "items", "itens", default=[]),
            _pick(sale_data, "paymentMethod", "payment_method"),
            _pick(sale_data, "total"),
            amount_received=_pick(sale_data, "amountReceived", "amount_received"),
            change_due=_pick(sale_data, "changeDue", "change_due"),
            receipt_width=_pick(sale_data, "receiptWidth", "receipt_width"),
        )
        receipt = None
        if res.receipt is not None:
            receipt = {"html": res.receipt.html, "path": str(res.receipt.path), "width": res.receipt.width}
        return {
            "sale_id": res.sale_id,
            "total": res.total,
            "payment_method": res.payment_method,
            "change_due": res.change_due,
            "receipt": receipt,
            "warnings": res.warnings,
        }

    def cancel_sale(self, sale_id):
        sid = require_positive_int(sale_id, "Sale id")
        return {"sale_id": sid, "cancelled": self.sales.cancel_sale(sid)}

    def list_sales(self):
        return _plain(self.sales.list_sales())

    def sales_report(self, date_from=None, date_to=None, report_filter: str = "all"):
        rep = self.sales.sales_report(date_from, date_to, report_filter)
        return {
            "sales": _plain(rep.sales),
            "revenue": rep.revenue,
            "sales_count": rep.sales_count,
            "items_count": rep.items_count,
        }

    def purge_history(self):
        return {"deleted": self.sales.purge_history()}

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def dashboard_data(self, start_date, end_date):
        return DashboardModel(self.store).refresh(DateRange.of(start_date, end_date)).as_dict()
