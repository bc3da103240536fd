# tests/test_commands.py
import json

import pytest

from retail_pos import main as cli
from retail_pos.config import Settings
from retail_pos.constants import DATA_DIR_ENV
from retail_pos.modules.commands import PosApp


def _fake_pdf(html, target, width_mm):
    target.write_bytes(b"%PDF fake")


@pytest.fixture()
def app(tmp_path, clock):
    a = PosApp.open(Settings(data_path=tmp_path / "data"), clock=clock, pdf_writer=_fake_pdf)
    try:
        yield a
    finally:
        a.close()


def _add(app, name="Café", price=10, stock=5, **extra):
    res = app.dispatch("addProduct", {"name": name, "price": price, "stock": stock, **extra})
    assert res.ok, res.error
    return res.data


def test_unknown_command(app):
    res = app.dispatch("dropTables")
    assert not res.ok and res.error_type == "UnknownCommand"


def test_catalog_commands(app):
    cat = app.dispatch("addCategory", "Bebidas").data
    p = _add(app, "Suco", 7.5, 3, category_id=cat["category_id"], barcode="111")

    assert p["stock_level"] == "low"
    assert p["category_name"] == "Bebidas"
    assert app.dispatch("findByBarcode", "111").data["product_id"] == p["product_id"]
    assert app.dispatch("findByBarcode", "999").data is None
    assert [c["name"] for c in app.dispatch("listCategories").data] == ["Bebidas"]

    upd = app.dispatch("updateProduct", p["product_id"], {"name": "Suco", "price": 8, "stock": 30})
    assert upd.ok and upd.data["stock_level"] == "high"

    assert app.dispatch("deleteProduct", p["product_id"]).ok
    assert app.dispatch("listProducts").data == []


def test_errors_are_reported_by_kind(app):
    _add(app, "A", barcode="123")

    bad = app.dispatch("addProduct", {"name": "", "price": 1, "stock": 1})
    assert not bad.ok and bad.error_type == "ValidationError"

    dup = app.dispatch("addProduct", {"name": "B", "price": 1, "stock": 1, "barcode": "123"})
    assert not dup.ok and dup.error_type == "DuplicateBarcodeError"

    missing = app.dispatch("cancelSale", 77)
    assert not missing.ok and missing.error_type == "SaleNotFoundError"

    junk = app.dispatch("cancelSale", "abc")
    assert not junk.ok and junk.error_type == "ValidationError"


def test_unexpected_error_is_generic(app, monkeypatch):
    def explode():
        raise RuntimeError("kaboom")

    monkeypatch.setattr(app.catalog, "list_products", explode)
    res = app.dispatch("listProducts")
    assert not res.ok
    assert res.error == "Operation failed."
    assert res.error_type == "InternalError"


def test_sale_lifecycle(app):
    p = _add(app, "Café", 10, 5)
    item = {"id": p["product_id"], "name": "Café", "quantity": 2, "price": 10}

    reg = app.dispatch(
        "registerSale",
        {"items": [item], "paymentMethod": "Dinheiro", "total": 20, "amountReceived": 50, "receiptWidth": 58},
    )
    assert reg.ok, reg.error
    assert reg.data["change_due"] == 30.0
    assert reg.data["payment_method"] == "cash"
    assert reg.data["receipt"]["width"] == 58
    assert "Documento não fiscal" in reg.data["receipt"]["html"]

    listed = app.dispatch("listSales").data
    assert listed[0]["sale_id"] == reg.data["sale_id"]
    assert listed[0]["items"][0]["product_name"] == "Café"

    assert app.dispatch("cancelSale", reg.data["sale_id"]).data["cancelled"] is True
    assert app.dispatch("cancelSale", reg.data["sale_id"]).data["cancelled"] is False

    report = app.dispatch("salesReport", "2025-03-14", "2025-03-14", "cancelled").data
    assert report["sales_count"] == 1 and report["revenue"] == 0.0

    assert app.dispatch("purgeHistory").data == {"deleted": 1}
    assert app.dispatch("listSales").data == []


def test_sale_saved_when_receipt_collaborator_crashes(app, monkeypatch):
    p = _add(app, "Café", 10, 5)

    def disk_full(sale, width=None):
        raise OSError("No space left on device")

    monkeypatch.setattr(app.receipts, "generate", disk_full)
    item = {"id": p["product_id"], "name": "Café", "quantity": 1, "price": 10}
    res = app.dispatch("registerSale", {"items": [item], "paymentMethod": "pix", "total": 10})

    assert res.ok, res.error
    assert res.data["receipt"] is None
    assert res.warnings and "receipt" in res.warnings[0]
    assert len(app.dispatch("listSales").data) == 1


def test_dashboard_command(app):
    p = _add(app, "Café", 10, 5)
    app.dispatch("registerSale", {
        "items": [{"id": p["product_id"], "name": "Café", "quantity": 1, "price": 10}],
        "paymentMethod": "pix",
        "total": 10,
    })
    data = app.dispatch("dashboardData", "2025-03-14", "2025-03-14").data
    assert data["summary"] == {"sales_count": 1, "revenue": 10.0, "average_ticket": 10.0}
    assert data["payment_methods"] == [{"payment_method": "pix", "count": 1}]

    bad = app.dispatch("dashboardData", "2025-03-14", "2025-03-01")
    assert not bad.ok and bad.error_type == "ValidationError"


# ---------------- CLI ----------------

@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    d = tmp_path / "pos"
    monkeypatch.setenv(DATA_DIR_ENV, str(d))
    return d


def test_cli_init_creates_database(data_dir):
    assert cli.main(["init"]) == 0
    assert (data_dir / "pdv-database.db").exists()


def test_cli_requires_activation(data_dir, capsys):
    assert cli.main(["sales"]) == 1
    assert "not activated" in capsys.readouterr().err


def test_cli_activate_then_dashboard(data_dir, capsys):
    assert cli.main(["keygen", "Padaria Central"]) == 0
    key = capsys.readouterr().out.strip()

    assert cli.main(["activate", "Padaria Central", "0000"]) == 1
    assert cli.main(["activate", "Padaria Central", key]) == 0
    capsys.readouterr()

    assert cli.main(["dashboard", "--start", "2025-01-01", "--end", "2025-01-31"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["summary"]["sales_count"] == 0


def test_cli_purge_needs_confirmation(data_dir):
    assert cli.main(["purge"]) == 1


def test_cli_unusable_database_exits_1(data_dir):
    data_dir.mkdir(parents=True)
    (data_dir / "pdv-database.db").write_bytes(b"garbage" * 200)
    assert cli.main(["init"]) == 1
