"""Order schemas"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class OrderType(str, Enum):
    """How the order is served"""
    TABLE = "Mesa"
    TAKEOUT = "Retirada"
    DELIVERY = "Delivery"

    @classmethod
    def _missing_(cls, value):
        # Accept English names as aliases of the stored values
        if isinstance(value, str):
            return {
                "table": cls.TABLE,
                "takeout": cls.TAKEOUT,
                "delivery": cls.DELIVERY,
            }.get(value.strip().lower())
        return None


class OrderStatus(str, Enum):
    """Order lifecycle. COMPLETED is never stored: it means ready for payment."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    READY = "ready"
    COMPLETED = "completed"
    PAID = "paid"


class PaymentMethod(str, Enum):
    """Tender types"""
    CASH = "Dinheiro"
    CREDIT = "Crédito"
    DEBIT = "Débito"
    PIX = "Pix"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return {
                "cash": cls.CASH,
                "credit": cls.CREDIT,
                "credito": cls.CREDIT,
                "debit": cls.DEBIT,
                "debito": cls.DEBIT,
                "pix": cls.PIX,
            }.get(value.strip().lower())
        return None


class DeliveryInfo(BaseModel):
    """Delivery address and contact"""
    client_name: str
    phone: str
    address: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    reference: Optional[str] = None


class OrderItemCreate(BaseModel):
    """Item requested on a new or existing order"""
    name: str = ""
    quantity: int = Field(1, gt=0)
    notes: str = ""
    product_id: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)


class OrderItem(BaseModel):
    """Order line"""
    id: Optional[str] = None
    name: str
    quantity: int
    notes: str = ""
    product_id: Optional[str] = None
    price: Optional[float] = None


class OrderCreate(BaseModel):
    """Create order request"""
    type: OrderType
    identifier: str
    items: List[OrderItemCreate] = []
    has_service_fee: bool = False
    delivery_info: Optional[DeliveryInfo] = None
    notes: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=128)


class Order(BaseModel):
    """Order with its lines"""
    id: str
    type: OrderType
    identifier: str
    time: str
    created_at: Optional[datetime] = None
    status: OrderStatus
    items: List[OrderItem] = []
    delivery_info: Optional[DeliveryInfo] = None
    has_service_fee: bool = False
    total_amount: Optional[float] = None
    payment_method: Optional[PaymentMethod] = None
    shift_id: Optional[int] = None
    notes: Optional[str] = None


class OrderCreated(BaseModel):
    """Create order response"""
    id: str
    order_number: int


class OrderStatusUpdate(BaseModel):
    """Advance status request"""
    status: OrderStatus


class OrderItemsAdd(BaseModel):
    """Add items request"""
    items: List[OrderItemCreate] = Field(..., min_length=1)


class PaymentRequest(BaseModel):
    """Process payment request"""
    payment_method: PaymentMethod


class OrderTotal(BaseModel):
    """Order total response"""
    order_id: str
    total: float


class ReconcileResult(BaseModel):
    """Reconciliation response"""
    repaired: List[str]
