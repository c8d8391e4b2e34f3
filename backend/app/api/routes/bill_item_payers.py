"""
Routes for prepayments users fronted against bill items.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.models.bill_item import BillItemPayer
from app.schemas.bill_item import BillItemPayerCreate, BillItemPayerUpdate, BillItemPayerResponse
from app.services import bill_item_payer_service
from app.api.dependencies import get_current_user
from app.api.routes.bills import check_bill_access
from app.api.routes.bill_items import get_item_or_404

router = APIRouter(prefix="/bill-item-payers", tags=["bill-item-payers"])


def get_prepayment_or_404(payer_id: int, db: Session) -> BillItemPayer:
    """Load a prepayment record or raise 404."""
    prepayment = db.query(BillItemPayer).filter(BillItemPayer.id == payer_id).first()
    if not prepayment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bill item payer not found"
        )
    return prepayment


@router.post("", response_model=BillItemPayerResponse, status_code=status.HTTP_201_CREATED)
async def create_bill_item_payer(
    payer_data: BillItemPayerCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record that a participant fronted money for an item."""
    item = get_item_or_404(payer_data.bill_item_id, db)
    check_bill_access(item.bill_id, current_user, db)
    
    try:
        return bill_item_payer_service.create_bill_item_payer(payer_data, item, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/item/{bill_item_id}", response_model=List[BillItemPayerResponse])
async def get_payers_by_item(
    bill_item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List prepayments for an item."""
    item = get_item_or_404(bill_item_id, db)
    check_bill_access(item.bill_id, current_user, db)
    return bill_item_payer_service.get_payers_by_item(bill_item_id, db)


@router.put("/{payer_id}", response_model=BillItemPayerResponse)
async def update_bill_item_payer(
    payer_id: int,
    payer_data: BillItemPayerUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a prepayment."""
    prepayment = get_prepayment_or_404(payer_id, db)
    check_bill_access(prepayment.bill_item.bill_id, current_user, db)
    return bill_item_payer_service.update_bill_item_payer(prepayment, payer_data, db)


@router.delete("/{payer_id}")
async def delete_bill_item_payer(
    payer_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a prepayment."""
    prepayment = get_prepayment_or_404(payer_id, db)
    check_bill_access(prepayment.bill_item.bill_id, current_user, db)
    
    db.delete(prepayment)
    db.commit()
    
    return {"message": "Bill item payer deleted successfully"}
