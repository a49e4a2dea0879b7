"""Database models"""

from foodpos.models.catalog import Category, Product, StockItem
from foodpos.models.order import Order, OrderItem
from foodpos.models.shift import Shift
from foodpos.models.user import Profile

__all__ = [
    "Category",
    "Product",
    "StockItem",
    "Order",
    "OrderItem",
    "Shift",
    "Profile",
]
