# kasir/database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from kasir.database.repositories import (
        # Products
        ProductsRepo, Product, DomainError, OutOfStock,
        # Sales
        SalesRepo, SaleHeader, SaleItem, SaleNotFound,
        # Settings
        SettingsRepo,
    )
"""

# ---------------- Products -----------------
from .products_repo import ProductsRepo, Product, DomainError, OutOfStock

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, SaleHeader, SaleItem, SaleNotFound, new_sale_number

# ---------------- Settings -----------------
from .settings_repo import SettingsRepo

__all__ = [
    # products_repo
    "ProductsRepo",
    "Product",
    "DomainError",
    "OutOfStock",
    # sales_repo
    "SalesRepo",
    "SaleHeader",
    "SaleItem",
    "SaleNotFound",
    "new_sale_number",
    # settings_repo
    "SettingsRepo",
]
