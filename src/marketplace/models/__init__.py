# src/marketplace/models/__init__.py

from .identity import User
from .product import Product, MIN_PRICE

__all__ = [
    "User",
    "Product",
    "MIN_PRICE",
]
