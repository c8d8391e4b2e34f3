"""
Pydantic schemas for bill settlement calculation.
"""
from pydantic import BaseModel
from typing import List
from decimal import Decimal


class BillUserCalculation(BaseModel):
    """A participant's obligation within a bill."""
    user_id: int
    bill_id: int
    share_ratio: Decimal
    due_amount: Decimal  # share_ratio / total share ratio * bill total
    prepaid_amount: Decimal  # Fronted for the bill's items
    paid_amount: Decimal  # Recorded payments against the bill
    net_amount: Decimal  # due - prepaid - paid; <= 0 means settled
    is_settled: bool


class Transfer(BaseModel):
    """Schema for a single suggested transfer."""
    from_user_id: int
    to_user_id: int
    amount: Decimal


class BillTransfers(BaseModel):
    """Schema for the suggested transfers that settle a bill."""
    bill_id: int
    currency_code: str
    transfers: List[Transfer] = []
