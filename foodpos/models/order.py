"""Order models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, JSON, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from foodpos.database import Base


class Order(Base):
    """Customer orders (tickets)"""
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Mesa, Retirada or Delivery
    order_type = Column(String(20), nullable=False, default="Retirada")
    table_number = Column(String(20))
    customer_name = Column(String(255))
    # {"client_name": "...", "phone": "...", "address": "...", ...}
    delivery_info = Column(JSON)

    # pending, in-progress, ready, paid
    status = Column(String(20), nullable=False, default="pending")

    # Pricing
    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    has_service_fee = Column(Boolean, default=False)

    # Payment
    payment_method = Column(String(20))
    paid = Column(Boolean, default=False)
    shift_id = Column(Integer, ForeignKey("shifts.id"))

    notes = Column(Text)
    idempotency_key = Column(String(128), unique=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True)


class OrderItem(Base):
    """Order line items"""
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"))
    name = Column(String(255))
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    notes = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="items")
