# retail_pos/modules/catalog/controller.py
from __future__ import annotations

from typing import Any, Mapping, Optional
import logging

from ...constants import LOW_STOCK_THRESHOLD, MEDIUM_STOCK_THRESHOLD
from ...database import Store
from ...database.repositories.categories_repo import CategoriesRepo, Category
from ...database.repositories.products_repo import Product, ProductsRepo
from ...utils.loggers import log_event
from ...utils.validators import (
    clean_optional,
    optional_id,
    require_non_negative_int,
    require_positive_float,
    require_positive_int,
    require_text,
)

_log = logging.getLogger(__name__)


def stock_level(stock: int) -> str:
    """'low' / 'medium' / 'high' band used to colour the catalog."""
    if stock <= LOW_STOCK_THRESHOLD:
        return "low"
    if stock <= MEDIUM_STOCK_THRESHOLD:
        return "medium"
    return "high"


class CatalogController:
    """
    Products and categories. Input is validated here, before the store is
    touched; uniqueness and references are left to the store's constraints.
    """

    def __init__(self, store: Store, images=None):
        self.store = store
        self.categories = CategoriesRepo(store)
        self.products = ProductsRepo(store)
        self.images = images

    # ---------------------------- Categories ----------------------------

    def list_categories(self) -> list[Category]:
        return self.categories.list_categories()

    def add_category(self, name) -> Category:
        cat = self.categories.create(require_text(name, "Category name"))
        _log.info("Category %r created (#%s)", cat.name, cat.category_id)
        return cat

    # ---------------------------- Products ----------------------------

    @staticmethod
    def _fields(fields: Mapping[str, Any]) -> dict:
        return {
            "name": require_text(fields.get("name"), "Name"),
            "price": round(require_positive_float(fields.get("price"), "Price"), 2),
            "stock": require_non_negative_int(fields.get("stock"), "Stock"),
            "image": clean_optional(fields.get("image")),
            "barcode": clean_optional(fields.get("barcode")),
            "category_id": optional_id(fields.get("category_id"), "Category"),
        }

    def list_products(self) -> list[Product]:
        return self.products.list_products()

    def get_product(self, product_id) -> Optional[Product]:
        return self.products.get(require_positive_int(product_id, "Product id"))

    def add_product(self, fields: Mapping[str, Any]) -> Product:
        data = self._fields(fields)
        pid = self.products.create(**data)
        _log.info("Product %r created (#%s)", data["name"], pid)
        return self.products.get(pid)

    def update_product(self, product_id, fields: Mapping[str, Any]) -> Product:
        pid = require_positive_int(product_id, "Product id")
        data = self._fields(fields)
        self.products.update(pid, **data)
        _log.info("Product #%s updated", pid)
        return self.products.get(pid)

    def find_by_barcode(self, code) -> Optional[Product]:
        """None when nothing matches (scan-to-add shows 'not found')."""
        code = clean_optional(code)
        if code is None:
            return None
        return self.products.find_by_barcode(code)

    def delete_product(self, product_id) -> Product:
        """
        Delete the row first; only after that commits is the stored image
        released. A failed release leaves an orphan file, not a broken delete.
        """
        pid = require_positive_int(product_id, "Product id")
        removed = self.products.delete(pid)
        log_event(_log, "catalog", "product_deleted", f"Product #{pid} deleted",
                  {"product_id": pid, "name": removed.name})
        if removed.image and self.images is not None:
            try:
                self.images.delete(removed.image)
            except OSError as e:
                _log.warning("Could not remove image %s of product #%s: %s", removed.image, pid, e)
        return removed

    def save_image(self, data, suggested_name: str) -> str:
        if self.images is None:
            raise RuntimeError("No image store configured.")
        return self.images.save(data, suggested_name)

    def image_path(self, filename):
        if self.images is None:
            return None
        return self.images.path(filename)

    def low_stock_products(self, threshold: int = LOW_STOCK_THRESHOLD) -> list[Product]:
        return self.products.low_stock(int(threshold))
