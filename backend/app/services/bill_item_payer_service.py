"""
Bill item payer service for prepayments fronted against bill items.
"""
import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from decimal import Decimal
from app.core.utils import partial_update, quantize_money, to_decimal
from app.models.bill import BillUser
from app.models.bill_item import BillItem, BillItemPayer
from app.schemas.bill_item import BillItemPayerCreate, BillItemPayerUpdate

logger = logging.getLogger(__name__)

PAYER_NULLABLE_FIELDS = ("percent", "note")


def amount_from_percent(item: BillItem, percent: Decimal) -> Decimal:
    """Amount covering `percent` of the item's total."""
    return quantize_money(to_decimal(item.total_amount) * to_decimal(percent) / Decimal(100))


def get_total_prepaid_by_user_and_bill(payer_id: int, bill_id: int, db: Session) -> Decimal:
    """Sum a user fronted across all items of a bill (0 if nothing)."""
    total = db.query(func.sum(BillItemPayer.amount)).join(
        BillItem, BillItemPayer.bill_item_id == BillItem.id
    ).filter(
        BillItemPayer.payer_id == payer_id,
        BillItem.bill_id == bill_id
    ).scalar()
    return to_decimal(total)


def get_total_prepaid_by_item(bill_item_id: int, db: Session) -> Decimal:
    """Sum fronted for a single item (0 if nothing)."""
    total = db.query(func.sum(BillItemPayer.amount)).filter(
        BillItemPayer.bill_item_id == bill_item_id
    ).scalar()
    return to_decimal(total)


def get_payers_by_item(bill_item_id: int, db: Session):
    """Prepayments recorded for an item."""
    return db.query(BillItemPayer).filter(
        BillItemPayer.bill_item_id == bill_item_id
    ).order_by(BillItemPayer.id.asc()).all()


def create_bill_item_payer(
    payer_data: BillItemPayerCreate,
    item: BillItem,
    db: Session
) -> BillItemPayer:
    """
    Record a prepayment for an item.
    When only a percent is given, the amount is derived from the item total.
    Raises ValueError if the payer is not a participant of the item's bill.
    """
    participant = db.query(BillUser).filter(
        BillUser.bill_id == item.bill_id,
        BillUser.user_id == payer_data.payer_id,
        BillUser.is_active.is_(True)
    ).first()
    if not participant:
        raise ValueError(f"User {payer_data.payer_id} is not a participant of this bill")
    
    amount = payer_data.amount
    if amount is None:
        amount = amount_from_percent(item, payer_data.percent)
        if amount <= 0:
            raise ValueError("Prepaid amount derived from percent must be positive")
    
    prepayment = BillItemPayer(
        bill_item_id=item.id,
        payer_id=payer_data.payer_id,
        amount=amount,
        percent=payer_data.percent,
        note=payer_data.note
    )
    db.add(prepayment)
    db.commit()
    db.refresh(prepayment)
    
    logger.info(
        f"Recorded prepayment of {amount} by user {prepayment.payer_id} for item {item.id}"
    )
    return prepayment


def update_bill_item_payer(
    prepayment: BillItemPayer,
    payer_data: BillItemPayerUpdate,
    db: Session
) -> BillItemPayer:
    """Update a prepayment; a new percent without an amount re-derives the amount."""
    changes = partial_update(payer_data, nullable=PAYER_NULLABLE_FIELDS)
    for field, value in changes.items():
        setattr(prepayment, field, value)
    
    if changes.get("percent") is not None and "amount" not in changes:
        prepayment.amount = amount_from_percent(prepayment.bill_item, changes["percent"])
    
    db.commit()
    db.refresh(prepayment)
    
    return prepayment
