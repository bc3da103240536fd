# retail_pos/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from retail_pos.database.repositories import (
        CategoriesRepo, Category,
        ProductsRepo, Product,
        SalesRepo, Sale, SaleItem,
        DashboardRepo,
    )
"""

# ---------------- Catalog -----------------
from .categories_repo import CategoriesRepo, Category
from .products_repo import ProductsRepo, Product

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, Sale, SaleItem

# ---------------- Reporting ----------------
from .dashboard_repo import DashboardRepo

__all__ = [
    "CategoriesRepo",
    "Category",
    "ProductsRepo",
    "Product",
    "SalesRepo",
    "Sale",
    "SaleItem",
    "DashboardRepo",
]
