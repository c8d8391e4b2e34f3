"""
Bill model and its participant junction table.
"""
from sqlalchemy import Column, String, Numeric, Text, Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Bill(BaseModel):
    """Bill model representing a shared expense owned by its creator."""
    __tablename__ = "bills"
    
    title = Column(String(200), nullable=False)
    user_created_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    currency_code = Column(String(3), nullable=False, default="VND")
    original_total_amount = Column(Numeric(15, 2), nullable=False, default=0)  # Sum of item totals
    total_amount = Column(Numeric(15, 2), nullable=False, default=0)  # After bill-level discount
    discount = Column(Numeric(15, 2), nullable=True)
    percent_discount = Column(Numeric(5, 2), nullable=True)
    note = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    
    # Relationships
    creator = relationship("User", back_populates="bills_created")
    bill_users = relationship("BillUser", back_populates="bill", cascade="all, delete-orphan")
    items = relationship(
        "BillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.id"
    )
    payments = relationship("Payment", back_populates="bill", cascade="all, delete-orphan")


class BillUser(BaseModel):
    """Junction table for Bill and User carrying the participant's share."""
    __tablename__ = "bill_users"
    
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    share_ratio = Column(Numeric(10, 2), nullable=False, default=1)
    amount_to_pay = Column(Numeric(15, 2), nullable=False, default=0)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_at = Column(DateTime, nullable=True)
    is_settled = Column(Boolean, default=False, nullable=False)
    settled_at = Column(DateTime, nullable=True)
    payment_note = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)  # False once removed from the bill
    
    # Relationships
    bill = relationship("Bill", back_populates="bill_users")
    user = relationship("User", back_populates="bill_users")
    
    # One row per user per bill; removal is a soft delete
    __table_args__ = (
        UniqueConstraint('bill_id', 'user_id', name='uq_bill_user'),
    )
