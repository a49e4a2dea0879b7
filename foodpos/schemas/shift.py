"""Shift schemas"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ShiftStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class Shift(BaseModel):
    """Cash register shift"""
    id: int
    start_time: str
    end_time: Optional[str] = None
    operator_name: str
    initial_amount: float
    closing_amount: Optional[float] = None
    closing_cash_amount: Optional[float] = None
    closing_debit_amount: Optional[float] = None
    closing_credit_amount: Optional[float] = None
    closing_pix_amount: Optional[float] = None
    status: ShiftStatus
    cash_transactions: int = 0
    card_transactions: int = 0
    pix_transactions: int = 0
    total_transactions: int = 0

    class Config:
        from_attributes = True


class ShiftOpen(BaseModel):
    """Open shift request"""
    operator_name: str = Field(..., min_length=1)
    initial_amount: float = Field(0, ge=0)


class ShiftClose(BaseModel):
    """Closing breakdown by tender type"""
    total: float = Field(0, ge=0)
    cash: float = Field(0, ge=0)
    debit: float = Field(0, ge=0)
    credit: float = Field(0, ge=0)
    pix: float = Field(0, ge=0)


class ShiftState(BaseModel):
    """Current shift response"""
    active: bool
    shift: Optional[Shift] = None
