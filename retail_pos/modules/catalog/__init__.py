from .controller import CatalogController, stock_level

__all__ = ["CatalogController", "stock_level"]
