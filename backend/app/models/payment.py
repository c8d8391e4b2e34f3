"""
Payment model for recorded transfers against a bill.
"""
from datetime import datetime
from sqlalchemy import Column, Numeric, Text, DateTime, ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class PaymentMethod(str, enum.Enum):
    """Payment method enumeration."""
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    E_WALLET = "e_wallet"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class Payment(BaseModel):
    """A payment a participant made to reconcile their share of a bill."""
    __tablename__ = "payments"
    
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    payer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    note = Column(Text, nullable=True)
    proof_url = Column(Text, nullable=True)
    paid_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    
    # Relationships
    bill = relationship("Bill", back_populates="payments")
    payer = relationship("User", back_populates="payments")
