# tests/test_catalog.py
import pytest

from retail_pos.errors import (
    DuplicateBarcodeError,
    DuplicateNameError,
    InvalidReferenceError,
    ProductNotFoundError,
    ValidationError,
)
from retail_pos.modules.catalog import CatalogController, stock_level
from retail_pos.modules.images import ImageStore


# ---------------- categories ----------------

def test_categories_are_listed_by_name(catalog):
    catalog.add_category("Padaria")
    catalog.add_category("Bebidas")
    assert [c.name for c in catalog.list_categories()] == ["Bebidas", "Padaria"]


def test_duplicate_category_name_is_refused(catalog):
    catalog.add_category("Bebidas")
    with pytest.raises(DuplicateNameError):
        catalog.add_category("Bebidas")
    assert len(catalog.list_categories()) == 1


def test_category_names_compare_case_sensitively(catalog):
    catalog.add_category("Bebidas")
    catalog.add_category("bebidas")
    assert len(catalog.list_categories()) == 2


def test_blank_category_name_is_invalid(catalog):
    with pytest.raises(ValidationError):
        catalog.add_category("   ")


# ---------------- products ----------------

def test_add_product_returns_stored_row(catalog):
    cat = catalog.add_category("Bebidas")
    p = catalog.add_product(
        {"name": "  Suco  ", "price": "7,50", "stock": "12", "barcode": "789100", "category_id": cat.category_id}
    )
    assert p.product_id is not None
    assert p.name == "Suco"
    assert p.price == 7.5
    assert p.stock == 12
    assert p.barcode == "789100"
    assert p.category_name == "Bebidas"


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "", "price": 1, "stock": 1},
        {"name": "X", "price": 0, "stock": 1},
        {"name": "X", "price": "abc", "stock": 1},
        {"name": "X", "price": 1, "stock": -1},
        {"name": "X", "price": 1, "stock": 1.5},
    ],
)
def test_invalid_product_fields_are_rejected(catalog, fields):
    with pytest.raises(ValidationError):
        catalog.add_product(fields)
    assert catalog.list_products() == []


def test_duplicate_barcode_is_refused(make_product):
    make_product("A", barcode="123")
    with pytest.raises(DuplicateBarcodeError):
        make_product("B", barcode="123")


def test_empty_barcodes_do_not_collide(make_product):
    a = make_product("A", barcode="")
    b = make_product("B", barcode="  ")
    assert a.barcode is None and b.barcode is None


def test_unknown_category_is_an_invalid_reference(make_product):
    with pytest.raises(InvalidReferenceError):
        make_product("A", category_id=999)


def test_products_listed_by_name(make_product, catalog):
    make_product("Pão")
    make_product("Café")
    make_product("Leite")
    assert [p.name for p in catalog.list_products()] == ["Café", "Leite", "Pão"]


def test_update_product(make_product, catalog):
    p = make_product("Café", price=10, stock=3)
    updated = catalog.update_product(p.product_id, {"name": "Café Especial", "price": 15, "stock": 8})
    assert (updated.name, updated.price, updated.stock) == ("Café Especial", 15.0, 8)


def test_update_missing_product(catalog):
    with pytest.raises(ProductNotFoundError):
        catalog.update_product(42, {"name": "X", "price": 1, "stock": 1})


def test_find_by_barcode(make_product, catalog):
    p = make_product("Café", barcode="7891000100103")
    assert catalog.find_by_barcode(" 7891000100103 ").product_id == p.product_id
    assert catalog.find_by_barcode("0000") is None
    assert catalog.find_by_barcode("") is None


def test_delete_keeps_sale_history(make_product, catalog, sales, line, store):
    p = make_product("Café", price=10, stock=5)
    sale = sales.register_sale([line(p, 2)], "pix", 20)

    removed = catalog.delete_product(p.product_id)
    assert removed.name == "Café"
    assert catalog.get_product(p.product_id) is None

    it = store.conn.execute(
        "SELECT product_id, product_name, quantity, unit_price FROM sale_items WHERE sale_id=?",
        (sale.sale_id,),
    ).fetchone()
    assert it["product_id"] is None
    assert (it["product_name"], it["quantity"], it["unit_price"]) == ("Café", 2, 10.0)


def test_delete_missing_product(catalog):
    with pytest.raises(ProductNotFoundError):
        catalog.delete_product(7)


def test_delete_releases_image(store, tmp_path):
    images = ImageStore(tmp_path / "imgs")
    cat = CatalogController(store, images=images)
    name = cat.save_image(b"\x89PNG fake", "foto.png")
    p = cat.add_product({"name": "Bolo", "price": 30, "stock": 1, "image": name})

    assert images.path(name).exists()
    cat.delete_product(p.product_id)
    assert not images.path(name).exists()


def test_delete_survives_image_release_failure(store, tmp_path, monkeypatch):
    images = ImageStore(tmp_path / "imgs")
    cat = CatalogController(store, images=images)
    p = cat.add_product({"name": "Bolo", "price": 30, "stock": 1, "image": "produto_1.png"})

    def broken(_name):
        raise OSError("read-only")

    monkeypatch.setattr(images, "delete", broken)
    cat.delete_product(p.product_id)
    assert cat.get_product(p.product_id) is None


@pytest.mark.parametrize(
    "stock,level",
    [(0, "low"), (5, "low"), (6, "medium"), (20, "medium"), (21, "high")],
)
def test_stock_level_bands(stock, level):
    assert stock_level(stock) == level


def test_low_stock_products(make_product, catalog):
    make_product("A", stock=2)
    make_product("B", stock=50)
    make_product("C", stock=5)
    assert [p.name for p in catalog.low_stock_products()] == ["A", "C"]
