"""
Pydantic schemas for Payment entity.
"""
from pydantic import BaseModel, Field, HttpUrl
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.models.payment import PaymentMethod


class PaymentCreate(BaseModel):
    """Schema for payment creation. paid_at defaults to now."""
    bill_id: int
    payer_id: int
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod = PaymentMethod.CASH
    note: Optional[str] = None
    proof_url: Optional[HttpUrl] = None
    paid_at: Optional[datetime] = None


class PaymentUpdate(BaseModel):
    """Schema for payment update."""
    amount: Optional[Decimal] = Field(None, gt=0)
    method: Optional[PaymentMethod] = None
    note: Optional[str] = None
    proof_url: Optional[HttpUrl] = None
    paid_at: Optional[datetime] = None


class PaymentResponse(BaseModel):
    """Schema for payment response."""
    id: int
    bill_id: int
    payer_id: int
    amount: Decimal
    method: PaymentMethod
    note: Optional[str] = None
    proof_url: Optional[str] = None
    paid_at: datetime
    created_at: datetime
    
    class Config:
        from_attributes = True


class PaymentMethodStats(BaseModel):
    """Schema for per-method payment totals of a bill."""
    method: PaymentMethod
    count: int
    total_amount: Decimal
