"""
Bill item routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.models.bill_item import BillItem
from app.schemas.bill_item import BillItemCreate, BillItemUpdate, BillItemResponse
from app.services import bill_item_service
from app.api.dependencies import get_current_user
from app.api.routes.bills import check_bill_access

router = APIRouter(prefix="/bill-items", tags=["bill-items"])


def get_item_or_404(item_id: int, db: Session) -> BillItem:
    """Load a bill item or raise 404."""
    item = db.query(BillItem).filter(BillItem.id == item_id).first()
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bill item not found"
        )
    return item


@router.post("", response_model=BillItemResponse, status_code=status.HTTP_201_CREATED)
async def create_bill_item(
    item_data: BillItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an item to a bill."""
    check_bill_access(item_data.bill_id, current_user, db)
    return bill_item_service.create_bill_item(item_data, db)


@router.get("/bill/{bill_id}", response_model=List[BillItemResponse])
async def get_items_by_bill(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the items of a bill in creation order."""
    check_bill_access(bill_id, current_user, db)
    return bill_item_service.get_items_by_bill(bill_id, db)


@router.get("/{item_id}", response_model=BillItemResponse)
async def get_bill_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a bill item."""
    item = get_item_or_404(item_id, db)
    check_bill_access(item.bill_id, current_user, db)
    return item


@router.put("/{item_id}", response_model=BillItemResponse)
async def update_bill_item(
    item_id: int,
    item_data: BillItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a bill item; pricing changes recompute item and bill totals."""
    item = get_item_or_404(item_id, db)
    check_bill_access(item.bill_id, current_user, db)
    return bill_item_service.update_bill_item(item, item_data, db)


@router.delete("/{item_id}")
async def delete_bill_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a bill item and its prepayments."""
    item = get_item_or_404(item_id, db)
    check_bill_access(item.bill_id, current_user, db)
    bill_item_service.delete_bill_item(item, db)
    return {"message": "Bill item deleted successfully"}
