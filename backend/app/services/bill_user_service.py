"""
Bill user service for participants, their shares and payment flags.
"""
import logging
from datetime import datetime
from sqlalchemy.orm import Session, joinedload
from decimal import Decimal
from typing import List, Optional
from app.core.utils import partial_update, to_decimal
from app.models.bill import Bill, BillUser
from app.schemas.bill import BillUserUpdate, SplitUser
from app.services.bill_item_payer_service import get_total_prepaid_by_user_and_bill
from app.services.payment_service import get_total_paid_by_user_and_bill

logger = logging.getLogger(__name__)

BILL_USER_NULLABLE_FIELDS = ("payment_note", "paid_at")


def get_bill_user(bill_id: int, user_id: int, db: Session, include_inactive: bool = False) -> Optional[BillUser]:
    """Find the participant row for a user in a bill."""
    query = db.query(BillUser).filter(
        BillUser.bill_id == bill_id,
        BillUser.user_id == user_id
    )
    if not include_inactive:
        query = query.filter(BillUser.is_active.is_(True))
    return query.first()


def get_users_in_bill(bill_id: int, db: Session) -> List[BillUser]:
    """Active participants of a bill."""
    return db.query(BillUser).options(
        joinedload(BillUser.user)
    ).filter(
        BillUser.bill_id == bill_id,
        BillUser.is_active.is_(True)
    ).order_by(BillUser.id.asc()).all()


def get_bills_of_user(user_id: int, db: Session) -> List[BillUser]:
    """Active participations of a user across bills."""
    return db.query(BillUser).options(
        joinedload(BillUser.user)
    ).filter(
        BillUser.user_id == user_id,
        BillUser.is_active.is_(True)
    ).order_by(BillUser.id.asc()).all()


def _reactivate(bill_user: BillUser):
    """Bring back a removed participant with a clean payment state."""
    bill_user.is_active = True
    bill_user.is_paid = False
    bill_user.paid_at = None
    bill_user.is_settled = False
    bill_user.settled_at = None


def add_user_to_bill(
    bill_id: int,
    user_id: int,
    db: Session,
    share_ratio: Decimal = Decimal(1),
    amount_to_pay: Decimal = Decimal(0),
    payment_note: Optional[str] = None
) -> BillUser:
    """
    Add a participant to a bill, reactivating a previously removed one.
    Raises ValueError if the user is already an active participant.
    """
    bill_user = get_bill_user(bill_id, user_id, db, include_inactive=True)
    if bill_user and bill_user.is_active:
        raise ValueError("User is already a participant of this bill")
    
    if bill_user:
        _reactivate(bill_user)
        bill_user.share_ratio = share_ratio
        bill_user.amount_to_pay = amount_to_pay
        bill_user.payment_note = payment_note
    else:
        bill_user = BillUser(
            bill_id=bill_id,
            user_id=user_id,
            share_ratio=share_ratio,
            amount_to_pay=amount_to_pay,
            payment_note=payment_note
        )
        db.add(bill_user)
    
    db.commit()
    db.refresh(bill_user)
    
    return bill_user


def split_bill(bill: Bill, users: List[SplitUser], db: Session) -> List[BillUser]:
    """
    Assign amount_to_pay (and optionally share_ratio) to several users at once.
    Existing participants are updated, new ones created, all in one commit.
    Raises ValueError if the split amounts exceed the bill total.
    """
    total_split = sum((to_decimal(u.amount_to_pay) for u in users), Decimal(0))
    if total_split > to_decimal(bill.total_amount):
        raise ValueError("Total split amount cannot exceed the bill total")
    
    results = []
    for split in users:
        bill_user = get_bill_user(bill.id, split.user_id, db, include_inactive=True)
        if not bill_user:
            bill_user = BillUser(bill_id=bill.id, user_id=split.user_id)
            db.add(bill_user)
        elif not bill_user.is_active:
            _reactivate(bill_user)
        bill_user.amount_to_pay = split.amount_to_pay
        bill_user.payment_note = split.payment_note
        if split.share_ratio is not None:
            bill_user.share_ratio = split.share_ratio
        elif bill_user.share_ratio is None:
            bill_user.share_ratio = Decimal(1)
        results.append(bill_user)
    
    db.commit()
    for bill_user in results:
        db.refresh(bill_user)
    
    logger.info(f"Split bill {bill.id} across {len(results)} users ({total_split} {bill.currency_code})")
    return results


def mark_as_paid(bill_user: BillUser, db: Session, payment_note: Optional[str] = None) -> BillUser:
    """Flag a participant as paid now."""
    bill_user.is_paid = True
    bill_user.paid_at = datetime.utcnow()
    if payment_note:
        bill_user.payment_note = payment_note
    
    db.commit()
    db.refresh(bill_user)
    
    return bill_user


def update_bill_user(bill_user: BillUser, update_data: BillUserUpdate, db: Session) -> BillUser:
    """
    Update a participant's share or payment state.
    Marking paid without paid_at stamps now; marking unpaid clears paid_at.
    """
    changes = partial_update(update_data, nullable=BILL_USER_NULLABLE_FIELDS)
    for field, value in changes.items():
        setattr(bill_user, field, value)
    
    if changes.get("is_paid") is True and not bill_user.paid_at:
        bill_user.paid_at = datetime.utcnow()
    if changes.get("is_paid") is False:
        bill_user.paid_at = None
    
    db.commit()
    db.refresh(bill_user)
    
    return bill_user


def remove_user_from_bill(bill_user: BillUser, db: Session):
    """
    Soft-remove a participant.
    Raises ValueError while the user has prepayments or payments on the bill.
    """
    prepaid = get_total_prepaid_by_user_and_bill(bill_user.user_id, bill_user.bill_id, db)
    paid = get_total_paid_by_user_and_bill(bill_user.user_id, bill_user.bill_id, db)
    if prepaid > 0 or paid > 0:
        raise ValueError(
            "User has prepayments or payments on this bill; delete them before removing the user"
        )
    
    bill_user.is_active = False
    db.commit()


def get_bill_payment_stats(bill_id: int, db: Session) -> dict:
    """Paid/unpaid totals over amount_to_pay, plus the unpaid participants."""
    bill_users = get_users_in_bill(bill_id, db)
    
    total_paid = sum((to_decimal(bu.amount_to_pay) for bu in bill_users if bu.is_paid), Decimal(0))
    unpaid = [bu for bu in bill_users if not bu.is_paid]
    total_unpaid = sum((to_decimal(bu.amount_to_pay) for bu in unpaid), Decimal(0))
    
    return {
        "total_paid": total_paid,
        "total_unpaid": total_unpaid,
        "unpaid_users_count": len(unpaid),
        "unpaid_users": [
            {
                "user_id": bu.user_id,
                "user_name": bu.user.name,
                "user_email": bu.user.email,
                "amount_to_pay": bu.amount_to_pay
            }
            for bu in unpaid
        ]
    }
