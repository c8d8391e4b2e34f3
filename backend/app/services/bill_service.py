"""
Bill service for bill creation and total bookkeeping.
"""
from sqlalchemy.orm import Session
from decimal import Decimal
from app.core.config import settings
from app.core.utils import apply_discount, partial_update
from app.models.bill import Bill, BillUser
from app.models.user import User
from app.schemas.bill import BillCreate, BillUpdate
from app.services.bill_item_service import get_total_amount_by_bill

BILL_NULLABLE_FIELDS = ("discount", "percent_discount", "note", "image_url")


def get_bill_total(bill: Bill, db: Session) -> Decimal:
    """Bill total: sum of item totals after the bill-level discount."""
    original_total = get_total_amount_by_bill(bill.id, db)
    return apply_discount(original_total, bill.discount, bill.percent_discount)


def recalculate_bill_totals(bill: Bill, db: Session) -> Bill:
    """
    Refresh original_total_amount and total_amount from the bill's items.
    Pending item changes must be flushed first; the caller commits.
    """
    bill.original_total_amount = get_total_amount_by_bill(bill.id, db)
    bill.total_amount = apply_discount(
        bill.original_total_amount, bill.discount, bill.percent_discount
    )
    return bill


def create_bill(bill_data: BillCreate, creator: User, db: Session) -> Bill:
    """Create a bill and add its creator as the first participant."""
    currency_code = bill_data.currency_code or settings.DEFAULT_CURRENCY
    
    new_bill = Bill(
        title=bill_data.title,
        user_created_id=creator.id,
        currency_code=currency_code.upper(),
        original_total_amount=Decimal(0),
        total_amount=Decimal(0),
        discount=bill_data.discount,
        percent_discount=bill_data.percent_discount,
        note=bill_data.note,
        image_url=bill_data.image_url
    )
    db.add(new_bill)
    db.flush()
    
    creator_share = BillUser(
        bill_id=new_bill.id,
        user_id=creator.id,
        share_ratio=Decimal(1),
        amount_to_pay=Decimal(0)
    )
    db.add(creator_share)
    db.commit()
    db.refresh(new_bill)
    
    return new_bill


def update_bill(bill: Bill, bill_data: BillUpdate, db: Session) -> Bill:
    """Update bill fields; discount changes refresh the totals."""
    changes = partial_update(bill_data, nullable=BILL_NULLABLE_FIELDS)
    if changes.get("currency_code"):
        changes["currency_code"] = changes["currency_code"].upper()
    
    for field, value in changes.items():
        setattr(bill, field, value)
    
    if "discount" in changes or "percent_discount" in changes:
        recalculate_bill_totals(bill, db)
    
    db.commit()
    db.refresh(bill)
    
    return bill
