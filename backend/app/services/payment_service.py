"""
Payment service for payments recorded against bills.
"""
import logging
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from decimal import Decimal
from typing import List, Dict, Any
from app.core.utils import partial_update, to_decimal
from app.models.bill import BillUser
from app.models.payment import Payment
from app.schemas.payment import PaymentCreate, PaymentUpdate

logger = logging.getLogger(__name__)

PAYMENT_NULLABLE_FIELDS = ("note", "proof_url")


def get_payments_by_bill(bill_id: int, db: Session) -> List[Payment]:
    """Payments for a bill, newest first."""
    return db.query(Payment).filter(
        Payment.bill_id == bill_id
    ).order_by(Payment.paid_at.desc(), Payment.id.desc()).all()


def get_payments_by_payer_and_bill(payer_id: int, bill_id: int, db: Session) -> List[Payment]:
    """One user's payments for a bill, newest first."""
    return db.query(Payment).filter(
        Payment.payer_id == payer_id,
        Payment.bill_id == bill_id
    ).order_by(Payment.paid_at.desc(), Payment.id.desc()).all()


def get_total_paid_by_user_and_bill(payer_id: int, bill_id: int, db: Session) -> Decimal:
    """Sum a user paid against a bill (0 if nothing)."""
    total = db.query(func.sum(Payment.amount)).filter(
        Payment.payer_id == payer_id,
        Payment.bill_id == bill_id
    ).scalar()
    return to_decimal(total)


def get_total_paid_by_bill(bill_id: int, db: Session) -> Decimal:
    """Sum of all payments against a bill (0 if nothing)."""
    total = db.query(func.sum(Payment.amount)).filter(
        Payment.bill_id == bill_id
    ).scalar()
    return to_decimal(total)


def get_payment_stats_by_method(bill_id: int, db: Session) -> List[Dict[str, Any]]:
    """Payment count and total per method for a bill."""
    rows = db.query(
        Payment.method,
        func.count(Payment.id),
        func.sum(Payment.amount)
    ).filter(
        Payment.bill_id == bill_id
    ).group_by(Payment.method).all()
    
    return [
        {
            "method": method,
            "count": count,
            "total_amount": to_decimal(total)
        }
        for method, count, total in rows
    ]


def create_payment(payment_data: PaymentCreate, db: Session) -> Payment:
    """
    Record a payment against a bill.
    Raises ValueError if the payer is not a participant of the bill.
    """
    participant = db.query(BillUser).filter(
        BillUser.bill_id == payment_data.bill_id,
        BillUser.user_id == payment_data.payer_id,
        BillUser.is_active.is_(True)
    ).first()
    if not participant:
        raise ValueError(f"User {payment_data.payer_id} is not a participant of this bill")
    
    payment = Payment(
        bill_id=payment_data.bill_id,
        payer_id=payment_data.payer_id,
        amount=payment_data.amount,
        method=payment_data.method,
        note=payment_data.note,
        proof_url=str(payment_data.proof_url) if payment_data.proof_url else None,
        paid_at=payment_data.paid_at or datetime.utcnow()
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    
    logger.info(
        f"Recorded {payment.method.value} payment of {payment.amount} "
        f"by user {payment.payer_id} on bill {payment.bill_id}"
    )
    return payment


def update_payment(payment: Payment, payment_data: PaymentUpdate, db: Session) -> Payment:
    """Update a payment's amount, method, note, proof or time."""
    changes = partial_update(payment_data, nullable=PAYMENT_NULLABLE_FIELDS)
    if changes.get("proof_url") is not None:
        changes["proof_url"] = str(changes["proof_url"])
    
    for field, value in changes.items():
        setattr(payment, field, value)
    
    db.commit()
    db.refresh(payment)
    
    return payment
