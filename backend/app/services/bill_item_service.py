"""
Bill item service: item totals and bill-level aggregation.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session
from decimal import Decimal
from app.core.utils import apply_discount, partial_update, to_decimal
from app.models.bill_item import BillItem
from app.schemas.bill_item import BillItemCreate, BillItemUpdate

PRICING_FIELDS = ("unit_price", "quantity", "discount", "discount_percent")
ITEM_NULLABLE_FIELDS = ("discount", "discount_percent", "note")


def calculate_total_amount(
    unit_price: Decimal,
    quantity: Decimal,
    discount: Decimal = Decimal(0),
    discount_percent: Decimal = Decimal(0)
) -> Decimal:
    """
    Calculate an item's total: unit_price * quantity minus the flat discount
    and the percent discount (both computed on the subtotal), floored at zero.
    """
    subtotal = to_decimal(unit_price) * to_decimal(quantity)
    return apply_discount(subtotal, discount, discount_percent)


def get_total_amount_by_bill(bill_id: int, db: Session) -> Decimal:
    """Sum of item totals for a bill (0 when the bill has no items)."""
    total = db.query(func.sum(BillItem.total_amount)).filter(
        BillItem.bill_id == bill_id
    ).scalar()
    return to_decimal(total)


def get_items_by_bill(bill_id: int, db: Session):
    """Items of a bill in creation order."""
    return db.query(BillItem).filter(
        BillItem.bill_id == bill_id
    ).order_by(BillItem.created_at.asc(), BillItem.id.asc()).all()


def create_bill_item(item_data: BillItemCreate, db: Session) -> BillItem:
    """Create an item with its derived total and refresh the bill totals."""
    from app.services.bill_service import recalculate_bill_totals
    
    item = BillItem(
        bill_id=item_data.bill_id,
        name=item_data.name,
        unit_price=item_data.unit_price,
        quantity=item_data.quantity,
        discount=item_data.discount,
        discount_percent=item_data.discount_percent,
        total_amount=calculate_total_amount(
            item_data.unit_price,
            item_data.quantity,
            item_data.discount,
            item_data.discount_percent
        ),
        note=item_data.note
    )
    db.add(item)
    db.flush()
    
    recalculate_bill_totals(item.bill, db)
    db.commit()
    db.refresh(item)
    
    return item


def update_bill_item(item: BillItem, item_data: BillItemUpdate, db: Session) -> BillItem:
    """Apply changes; the total is recomputed only if a pricing field changed."""
    from app.services.bill_service import recalculate_bill_totals
    
    changes = partial_update(item_data, nullable=ITEM_NULLABLE_FIELDS)
    for field, value in changes.items():
        setattr(item, field, value)
    
    if any(field in changes for field in PRICING_FIELDS):
        item.total_amount = calculate_total_amount(
            item.unit_price,
            item.quantity,
            item.discount or 0,
            item.discount_percent or 0
        )
        db.flush()
        recalculate_bill_totals(item.bill, db)
    
    db.commit()
    db.refresh(item)
    
    return item


def delete_bill_item(item: BillItem, db: Session):
    """Delete an item (and its prepayments) and refresh the bill totals."""
    from app.services.bill_service import recalculate_bill_totals
    
    bill = item.bill
    db.delete(item)
    db.flush()
    
    recalculate_bill_totals(bill, db)
    db.commit()
