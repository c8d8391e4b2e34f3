"""
Pydantic schemas for Bill and BillUser entities.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from app.schemas.bill_item import BillItemResponse


class BillBase(BaseModel):
    """Base bill schema."""
    title: str = Field(..., min_length=1, max_length=200)
    currency_code: Optional[str] = Field(None, min_length=3, max_length=3)
    discount: Optional[Decimal] = Field(None, ge=0)
    percent_discount: Optional[Decimal] = Field(None, ge=0, le=100)
    note: Optional[str] = None
    image_url: Optional[str] = None


class BillCreate(BillBase):
    """Schema for bill creation. The creator joins as the first participant."""
    pass


class BillUpdate(BaseModel):
    """Schema for bill update."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    currency_code: Optional[str] = Field(None, min_length=3, max_length=3)
    discount: Optional[Decimal] = Field(None, ge=0)
    percent_discount: Optional[Decimal] = Field(None, ge=0, le=100)
    note: Optional[str] = None
    image_url: Optional[str] = None


class BillResponse(BillBase):
    """Schema for bill response."""
    id: int
    currency_code: str
    user_created_id: int
    original_total_amount: Decimal
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class BillUserCreate(BaseModel):
    """Schema for adding a user to a bill."""
    bill_id: int
    user_id: int
    share_ratio: Decimal = Field(Decimal(1), gt=0)
    amount_to_pay: Decimal = Field(Decimal(0), ge=0)
    payment_note: Optional[str] = None


class BillUserUpdate(BaseModel):
    """Schema for updating a participant's share or payment state."""
    share_ratio: Optional[Decimal] = Field(None, gt=0)
    amount_to_pay: Optional[Decimal] = Field(None, ge=0)
    is_paid: Optional[bool] = None
    payment_note: Optional[str] = None
    paid_at: Optional[datetime] = None


class MarkPaid(BaseModel):
    """Schema for marking a participant as paid."""
    payment_note: Optional[str] = None


class SplitUser(BaseModel):
    """One participant's portion in a split request."""
    user_id: int
    amount_to_pay: Decimal = Field(..., ge=0)
    share_ratio: Optional[Decimal] = Field(None, gt=0)
    payment_note: Optional[str] = None


class SplitBill(BaseModel):
    """Schema for splitting a bill across several users."""
    bill_id: int
    users: List[SplitUser] = Field(..., min_length=1)


class BillUserResponse(BaseModel):
    """Schema for bill participant response."""
    id: int
    bill_id: int
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    share_ratio: Decimal
    amount_to_pay: Decimal
    is_paid: bool
    paid_at: Optional[datetime] = None
    is_settled: bool
    settled_at: Optional[datetime] = None
    payment_note: Optional[str] = None
    
    class Config:
        from_attributes = True


class UnpaidUser(BaseModel):
    """Schema for an unpaid participant in payment stats."""
    user_id: int
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    amount_to_pay: Decimal


class BillPaymentStats(BaseModel):
    """Schema for a bill's paid/unpaid summary over amount_to_pay."""
    total_paid: Decimal
    total_unpaid: Decimal
    unpaid_users_count: int
    unpaid_users: List[UnpaidUser] = []


class BillDetailResponse(BillResponse):
    """Schema for detailed bill response with items and participants."""
    items: List[BillItemResponse] = []
    participants: List[BillUserResponse] = []
