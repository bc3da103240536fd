# tests/test_receipts.py
import pytest

from retail_pos.database.repositories.sales_repo import Sale, SaleItem
from retail_pos.errors import ReceiptError
from retail_pos.modules.receipts import ReceiptFormatter, ReceiptService
from retail_pos.modules.sales import SalesController
from retail_pos.utils.helpers import fmt_brl


def _sale(**over):
    data = dict(
        sale_id=7,
        sold_at="2025-03-14 10:30:00",
        total=25.0,
        payment_method="pix",
        status="completed",
        amount_received=None,
        change_due=None,
        items=[SaleItem(1, "Café", 2, 10.0), SaleItem(2, "Pão", 1, 5.0)],
    )
    data.update(over)
    return Sale(**data)


class RecordingWriter:
    def __init__(self):
        self.calls = []

    def __call__(self, html, target, width_mm):
        self.calls.append((target, width_mm))
        target.write_bytes(b"%PDF-1.7 fake")


def test_fmt_brl():
    assert fmt_brl(1234.5) == "R$ 1.234,50"
    assert fmt_brl(0) == "R$ 0,00"


def test_receipt_html_content():
    html = ReceiptFormatter().render_html(_sale())
    assert "Venda #7" in html
    assert "14/03/2025 10:30:00" in html
    assert "Pix" in html
    assert "R$ 25,00" in html
    assert "R$ 20,00" in html  # line total
    assert "Documento não fiscal" in html
    assert "Troco" not in html


def test_receipt_escapes_item_names():
    sale = _sale(items=[SaleItem(1, "<b>Bolo</b>", 1, 25.0)])
    html = ReceiptFormatter().render_html(sale)
    assert "&lt;b&gt;Bolo&lt;/b&gt;" in html


def test_cash_receipt_shows_change_and_discount():
    sale = _sale(payment_method="cash", total=22.5, amount_received=30.0, change_due=7.5)
    html = ReceiptFormatter().render_html(sale)
    assert "Dinheiro" in html
    assert "Troco:</strong> R$ 7,50" in html
    assert "Desconto:</strong> R$ 2,50" in html


def test_narrow_receipt_drops_unit_price_column():
    fmt = ReceiptFormatter()
    assert "Preço" in fmt.render_html(_sale(), 80)
    narrow = fmt.render_html(_sale(), 58)
    assert "Preço" not in narrow
    assert "58mm" in narrow


@pytest.mark.parametrize("width,expected", [(58, 58), (80, 80), ("58", 58), (None, 80), (100, 80), ("x", 80)])
def test_width_normalisation(width, expected):
    assert ReceiptFormatter.normalize_width(width) == expected


def test_missing_sale_is_a_receipt_error():
    with pytest.raises(ReceiptError):
        ReceiptFormatter().render_html(None)


def test_service_writes_pdf_synchronously(tmp_path):
    writer = RecordingWriter()
    svc = ReceiptService(tmp_path / "receipts", pdf_writer=writer, background=False)
    job = svc.generate(_sale(), width=58)

    assert job.done
    assert job.result.success
    assert job.path.name == "recibo_venda_7.pdf"
    assert job.path.exists()
    assert writer.calls == [(job.path, 58)]


def test_service_background_job(tmp_path):
    svc = ReceiptService(tmp_path / "receipts", pdf_writer=RecordingWriter())
    job = svc.generate(_sale())
    result = job.wait(timeout=10)
    assert result is not None and result.success
    assert (tmp_path / "receipts" / "recibo_venda_7.pdf").exists()


def test_pdf_failure_is_reported_not_raised(tmp_path):
    def broken(html, target, width_mm):
        raise RuntimeError("no fonts")

    svc = ReceiptService(tmp_path, pdf_writer=broken, background=False)
    job = svc.generate(_sale())
    assert job.result.success is False
    assert "no fonts" in job.result.message
    assert "Documento não fiscal" in job.html


def test_registered_sale_carries_receipt(store, make_product, line, tmp_path):
    svc = ReceiptService(tmp_path, pdf_writer=RecordingWriter(), background=False)
    ctl = SalesController(store, receipts=svc)
    p = make_product("Café", price=10, stock=5)

    res = ctl.register_sale([line(p, 2)], "dinheiro", 20, amount_received=50, receipt_width=58)

    assert res.receipt.result.success
    assert res.receipt.path.name == f"recibo_venda_{res.sale_id}.pdf"
    assert "Troco:</strong> R$ 30,00" in res.receipt.html
    assert res.warnings == []
