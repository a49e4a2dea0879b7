"""Catalog and inventory schemas"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Category(BaseModel):
    """Product category"""
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    active: bool = True


class Product(BaseModel):
    """Product joined with its category name and stock quantity"""
    id: str
    name: str
    category: str
    category_id: Optional[str] = None
    price: float
    stock: float = 0
    active: bool = True
    image_url: str = ""


class ProductCreate(BaseModel):
    """Create product request"""
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    price: float = Field(..., ge=0)
    stock: float = Field(0, ge=0)
    active: bool = True
    image_url: str = ""


class ProductUpdate(BaseModel):
    """Update product request"""
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[float] = Field(None, ge=0)
    active: Optional[bool] = None
    image_url: Optional[str] = None


class StockItemCategory(str, Enum):
    INGREDIENTS = "Ingredientes"
    VEGETABLES = "Vegetais"
    DRINKS = "Bebidas"
    DISPOSABLES = "Descartáveis"
    OTHER = "Outros"


class StockStatus(str, Enum):
    """Stock level classification"""
    OUT = "Esgotado"
    CRITICAL = "Crítico"
    LOW = "Baixo"
    OK = "Ok"


class StockItem(BaseModel):
    """Stock row joined with its product"""
    id: str
    name: str
    category: StockItemCategory = StockItemCategory.INGREDIENTS
    quantity: float
    unit: str = "un"
    min_stock: float = 0
    purchase_price: Optional[float] = None
    last_update: Optional[datetime] = None
    image_url: str = ""
    product_id: Optional[str] = None


class StockItemCreate(BaseModel):
    """Create stock item request"""
    name: str = Field(..., min_length=1)
    category: StockItemCategory = StockItemCategory.INGREDIENTS
    quantity: float = Field(0, ge=0)
    unit: str = "un"
    min_stock: float = Field(0, ge=0)
    purchase_price: Optional[float] = Field(None, ge=0)
    product_id: Optional[str] = None


class StockItemUpdate(BaseModel):
    """Update stock item request"""
    name: Optional[str] = None
    category: Optional[StockItemCategory] = None
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    min_stock: Optional[float] = Field(None, ge=0)
    purchase_price: Optional[float] = Field(None, ge=0)


class QuantityAdjust(BaseModel):
    """Add to or remove from a stock item"""
    quantity: float = Field(..., gt=0)
    increment: bool = True


class StockItemStatus(BaseModel):
    id: str
    name: str
    quantity: float
    min_stock: float
    status: StockStatus


class StockValue(BaseModel):
    total: float
