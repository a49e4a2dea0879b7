"""Catalog and inventory models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from foodpos.database import Base


class Category(Base):
    """Product categories"""
    __tablename__ = "categories"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    color = Column(String(20))
    icon = Column(String(50))
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    products = relationship("Product", back_populates="category", passive_deletes=True)


class Product(Base):
    """Sellable products"""
    __tablename__ = "products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    image_url = Column(String(500))
    category_id = Column(UUID(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"))
    available = Column(Boolean, default=True)
    featured = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    category = relationship("Category", back_populates="products")


class StockItem(Base):
    """Stock rows, usually one per product"""
    __tablename__ = "stock"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(UUID(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"))
    quantity = Column(Numeric(12, 3, asdecimal=False), nullable=False, default=0)
    unit = Column(String(20), nullable=False, default="un")
    min_stock = Column(Numeric(12, 3, asdecimal=False), default=0)
    purchase_price = Column(Numeric(12, 2, asdecimal=False))
    category = Column(String(50), default="Ingredientes")  # Ingredientes, Vegetais, Bebidas, ...
    last_update = Column(DateTime, default=datetime.utcnow)
