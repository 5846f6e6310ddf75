# khanya/models/__init__.py
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from .order import Order, OrderItem, OrderStatusHistory  # noqa: E402
from .verification import EmailVerification  # noqa: E402
from .metrics import BaleMetric  # noqa: E402
from .user import UserRole  # noqa: E402
from .catalog import Bale, BaleItem, ProductCategory, StockItem, StockItemImage  # noqa: E402
from .legacy import Category, Product, ProductImage  # noqa: E402

__all__ = [
    "db",
    "Order", "OrderItem", "OrderStatusHistory",
    "EmailVerification",
    "BaleMetric",
    "UserRole",
    "Bale", "BaleItem", "ProductCategory", "StockItem", "StockItemImage",
    "Category", "Product", "ProductImage",
]
