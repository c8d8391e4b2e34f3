"""
Bill item model and the prepayments made against each item.
"""
from sqlalchemy import Column, String, Numeric, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class BillItem(BaseModel):
    """One priced line within a bill."""
    __tablename__ = "bill_items"
    
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(15, 2), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False, default=1)
    discount = Column(Numeric(15, 2), nullable=True, default=0)
    discount_percent = Column(Numeric(5, 2), nullable=True, default=0)
    total_amount = Column(Numeric(15, 2), nullable=False)  # unit_price * quantity - discounts
    note = Column(Text, nullable=True)
    
    # Relationships
    bill = relationship("Bill", back_populates="items")
    payers = relationship("BillItemPayer", back_populates="bill_item", cascade="all, delete-orphan")


class BillItemPayer(BaseModel):
    """Records a user fronting money for a specific bill item."""
    __tablename__ = "bill_item_payers"
    
    bill_item_id = Column(Integer, ForeignKey("bill_items.id"), nullable=False, index=True)
    payer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    percent = Column(Numeric(5, 2), nullable=True)
    note = Column(Text, nullable=True)
    
    # Relationships
    bill_item = relationship("BillItem", back_populates="payers")
    payer = relationship("User", back_populates="item_prepayments")
