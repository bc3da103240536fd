# retail_pos/modules/receipts/formatter.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ...constants import DEFAULT_RECEIPT_WIDTH, RECEIPT_WIDTHS
from ...database.repositories.sales_repo import Sale
from ...errors import ReceiptError
from ...utils.helpers import TIMESTAMP_FORMAT, fmt_brl, to_cents
from ..sales.payments import PaymentMethod

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
RECEIPT_TEMPLATE = "receipt.html"


def _payment_label(raw: str | None) -> str:
    if not raw or not raw.strip():
        return "Não informado"
    method = PaymentMethod.parse(raw)
    if method is PaymentMethod.OTHER:
        return raw.strip().capitalize()
    return method.label


def _local_datetime(sold_at: str) -> str:
    try:
        return datetime.strptime(sold_at, TIMESTAMP_FORMAT).strftime("%d/%m/%Y %H:%M:%S")
    except (TypeError, ValueError):
        return sold_at or ""


class ReceiptFormatter:
    """
    Sale -> printable HTML. Pure: reads nothing but the Sale it is given.
    Width is the paper roll in millimetres (58 or 80).
    """

    def __init__(self, templates_dir: Path | str = TEMPLATES_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["brl"] = fmt_brl

    @staticmethod
    def normalize_width(width) -> int:
        try:
            w = int(width) if width not in (None, "") else DEFAULT_RECEIPT_WIDTH
        except (TypeError, ValueError):
            w = DEFAULT_RECEIPT_WIDTH
        return w if w in RECEIPT_WIDTHS else DEFAULT_RECEIPT_WIDTH

    def context(self, sale: Sale, width: int) -> dict:
        subtotal = to_cents(sum(it.line_total for it in sale.items))
        return {
            "sale": sale,
            "width_mm": width,
            "narrow": width < DEFAULT_RECEIPT_WIDTH,
            "sold_at": _local_datetime(sale.sold_at),
            "payment_label": _payment_label(sale.payment_method),
            "discount": max(0.0, to_cents(subtotal - sale.total)),
        }

    def render_html(self, sale: Sale, width=None) -> str:
        if sale is None:
            raise ReceiptError("Sale not found.")
        w = self.normalize_width(width)
        try:
            template = self.env.get_template(RECEIPT_TEMPLATE)
            return template.render(**self.context(sale, w))
        except TemplateError as e:
            raise ReceiptError(f"Receipt template failed: {e}") from e
