"""
Bill management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User, UserRole
from app.models.bill import Bill, BillUser
from app.schemas.bill import (
    BillCreate, BillUpdate, BillResponse, BillDetailResponse, BillUserResponse
)
from app.schemas.bill_item import BillItemResponse
from app.api.dependencies import get_current_user

router = APIRouter(prefix="/bills", tags=["bills"])


def check_bill_access(bill_id: int, user: User, db: Session) -> Bill:
    """Check if user can read the bill (creator, active participant or admin)."""
    bill = db.query(Bill).filter(Bill.id == bill_id).first()
    if not bill:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bill not found"
        )
    
    if user.role == UserRole.ADMIN or bill.user_created_id == user.id:
        return bill
    
    participant = db.query(BillUser).filter(
        BillUser.bill_id == bill_id,
        BillUser.user_id == user.id,
        BillUser.is_active.is_(True)
    ).first()
    
    if not participant:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this bill"
        )
    
    return bill


def check_bill_owner(bill_id: int, user: User, db: Session) -> Bill:
    """Check if user may modify the bill (creator or admin)."""
    bill = check_bill_access(bill_id, user, db)
    if user.role != UserRole.ADMIN and bill.user_created_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the bill creator can modify this bill"
        )
    return bill


def build_bill_user_response(bill_user: BillUser) -> BillUserResponse:
    """Participant response including the user's name and email."""
    return BillUserResponse(
        id=bill_user.id,
        bill_id=bill_user.bill_id,
        user_id=bill_user.user_id,
        user_name=bill_user.user.name if bill_user.user else None,
        user_email=bill_user.user.email if bill_user.user else None,
        share_ratio=bill_user.share_ratio,
        amount_to_pay=bill_user.amount_to_pay,
        is_paid=bill_user.is_paid,
        paid_at=bill_user.paid_at,
        is_settled=bill_user.is_settled,
        settled_at=bill_user.settled_at,
        payment_note=bill_user.payment_note
    )


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_data: BillCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new bill; the creator joins as a participant."""
    from app.services.bill_service import create_bill as create_bill_record
    return create_bill_record(bill_data, current_user, db)


@router.get("", response_model=List[BillResponse])
async def list_bills(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List bills the current user created or participates in."""
    participant_bill_ids = db.query(BillUser.bill_id).filter(
        BillUser.user_id == current_user.id,
        BillUser.is_active.is_(True)
    )
    bills = db.query(Bill).filter(
        or_(
            Bill.user_created_id == current_user.id,
            Bill.id.in_(participant_bill_ids)
        )
    ).order_by(Bill.created_at.desc(), Bill.id.desc()).all()
    return bills


@router.get("/{bill_id}", response_model=BillDetailResponse)
async def get_bill(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get bill details with items and participants."""
    bill = check_bill_access(bill_id, current_user, db)
    
    from app.services.bill_user_service import get_users_in_bill
    participants = [build_bill_user_response(bu) for bu in get_users_in_bill(bill_id, db)]
    items = [BillItemResponse.model_validate(item) for item in bill.items]
    
    return BillDetailResponse(
        **BillResponse.model_validate(bill).model_dump(),
        items=items,
        participants=participants
    )


@router.put("/{bill_id}", response_model=BillResponse)
async def update_bill(
    bill_id: int,
    bill_data: BillUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a bill (creator only)."""
    bill = check_bill_owner(bill_id, current_user, db)
    
    from app.services.bill_service import update_bill as update_bill_record
    return update_bill_record(bill, bill_data, db)


@router.delete("/{bill_id}")
async def delete_bill(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a bill with its items, participants and payments (creator only)."""
    bill = check_bill_owner(bill_id, current_user, db)
    
    db.delete(bill)
    db.commit()
    
    return {"message": "Bill deleted successfully"}
