"""
User model for authentication and user management.
"""
from sqlalchemy import Column, String, Boolean, Text, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"


class User(BaseModel):
    """User model; email is the login identifier."""
    __tablename__ = "users"
    
    email = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False)
    bank_info = Column(JSON, nullable=True)  # bank_name, account_number, account_holder_name
    avatar_url = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    bills_created = relationship("Bill", back_populates="creator", cascade="all, delete-orphan")
    bill_users = relationship("BillUser", back_populates="user", cascade="all, delete-orphan")
    item_prepayments = relationship("BillItemPayer", back_populates="payer", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="payer", cascade="all, delete-orphan")
