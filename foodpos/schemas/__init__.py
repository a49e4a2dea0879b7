"""Pydantic schemas for domain objects and request/response validation"""

from foodpos.schemas.auth import (
    AuthEvent,
    Session,
    SessionUser,
    SignUpRequest,
    Profile,
)
from foodpos.schemas.catalog import (
    Category,
    Product,
    ProductCreate,
    ProductUpdate,
    StockItem,
    StockItemCategory,
    StockItemCreate,
    StockItemUpdate,
    StockStatus,
    QuantityAdjust,
)
from foodpos.schemas.order import (
    DeliveryInfo,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
    OrderType,
    PaymentMethod,
)
from foodpos.schemas.shift import (
    Shift,
    ShiftClose,
    ShiftOpen,
    ShiftStatus,
)

__all__ = [
    "AuthEvent",
    "Session",
    "SessionUser",
    "SignUpRequest",
    "Profile",
    "Category",
    "Product",
    "ProductCreate",
    "ProductUpdate",
    "StockItem",
    "StockItemCategory",
    "StockItemCreate",
    "StockItemUpdate",
    "StockStatus",
    "QuantityAdjust",
    "DeliveryInfo",
    "Order",
    "OrderCreate",
    "OrderItem",
    "OrderItemCreate",
    "OrderStatus",
    "OrderType",
    "PaymentMethod",
    "Shift",
    "ShiftClose",
    "ShiftOpen",
    "ShiftStatus",
]
