"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User, UserRole
from app.models.bill import Bill, BillUser
from app.models.bill_item import BillItem, BillItemPayer
from app.models.payment import Payment, PaymentMethod

__all__ = [
    "User",
    "UserRole",
    "Bill",
    "BillUser",
    "BillItem",
    "BillItemPayer",
    "Payment",
    "PaymentMethod",
]
