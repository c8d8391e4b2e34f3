"""
Pydantic schemas for BillItem and BillItemPayer entities.
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal


class BillItemBase(BaseModel):
    """Base bill item schema."""
    name: str = Field(..., min_length=1, max_length=255)
    unit_price: Decimal = Field(..., gt=0)
    quantity: Decimal = Field(Decimal(1), gt=0)
    discount: Decimal = Field(Decimal(0), ge=0)
    discount_percent: Decimal = Field(Decimal(0), ge=0, le=100)
    note: Optional[str] = None


class BillItemCreate(BillItemBase):
    """Schema for bill item creation."""
    bill_id: int


class BillItemUpdate(BaseModel):
    """Schema for bill item update."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    unit_price: Optional[Decimal] = Field(None, gt=0)
    quantity: Optional[Decimal] = Field(None, gt=0)
    discount: Optional[Decimal] = Field(None, ge=0)
    discount_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    note: Optional[str] = None


class BillItemResponse(BillItemBase):
    """Schema for bill item response."""
    id: int
    bill_id: int
    discount: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    
    class Config:
        from_attributes = True


class BillItemPayerCreate(BaseModel):
    """Schema for recording a prepayment; amount or percent is required."""
    bill_item_id: int
    payer_id: int
    amount: Optional[Decimal] = Field(None, gt=0)
    percent: Optional[Decimal] = Field(None, gt=0, le=100)
    note: Optional[str] = None
    
    @model_validator(mode="after")
    def check_amount_or_percent(self):
        if self.amount is None and self.percent is None:
            raise ValueError("Either amount or percent must be provided")
        return self


class BillItemPayerUpdate(BaseModel):
    """Schema for prepayment update."""
    amount: Optional[Decimal] = Field(None, gt=0)
    percent: Optional[Decimal] = Field(None, gt=0, le=100)
    note: Optional[str] = None


class BillItemPayerResponse(BaseModel):
    """Schema for prepayment response."""
    id: int
    bill_item_id: int
    payer_id: int
    amount: Decimal
    percent: Optional[Decimal] = None
    note: Optional[str] = None
    created_at: datetime
    
    class Config:
        from_attributes = True
