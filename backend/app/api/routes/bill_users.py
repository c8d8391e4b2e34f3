"""
Bill participant routes: shares, splits and paid flags.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User, UserRole
from app.models.bill import BillUser
from app.schemas.bill import (
    BillUserCreate, BillUserUpdate, BillUserResponse, MarkPaid, SplitBill, BillPaymentStats
)
from app.services import bill_user_service
from app.api.dependencies import get_current_user
from app.api.routes.bills import check_bill_access, check_bill_owner, build_bill_user_response

router = APIRouter(prefix="/bill-users", tags=["bill-users"])


def get_bill_user_or_404(bill_id: int, user_id: int, db: Session) -> BillUser:
    """Load an active participant row or raise 404."""
    bill_user = bill_user_service.get_bill_user(bill_id, user_id, db)
    if not bill_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User is not a participant of this bill"
        )
    return bill_user


def ensure_user_exists(user_id: int, db: Session) -> User:
    """Load an active user or raise 404."""
    user = db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return user



def check_participant_edit(bill_id: int, user_id: int, current_user: User, db: Session, share_fields: bool = False):
    """
    A participant may update their own paid state; the bill creator or an admin
    may update anyone. Share and amount-to-pay changes are creator or admin only.
    """
    bill = check_bill_access(bill_id, current_user, db)
    is_owner = current_user.role == UserRole.ADMIN or bill.user_created_id == current_user.id
    if is_owner:
        return bill
    if current_user.id != user_id or share_fields:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the bill creator can change other participants or shares"
        )
    return bill

@router.post("", response_model=BillUserResponse, status_code=status.HTTP_201_CREATED)
async def add_user_to_bill(
    bill_user_data: BillUserCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a user to a bill."""
    check_bill_access(bill_user_data.bill_id, current_user, db)
    ensure_user_exists(bill_user_data.user_id, db)
    
    try:
        bill_user = bill_user_service.add_user_to_bill(
            bill_user_data.bill_id,
            bill_user_data.user_id,
            db,
            share_ratio=bill_user_data.share_ratio,
            amount_to_pay=bill_user_data.amount_to_pay,
            payment_note=bill_user_data.payment_note
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    
    return build_bill_user_response(bill_user)


@router.post("/split", response_model=List[BillUserResponse])
async def split_bill(
    split_data: SplitBill,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Assign amounts to pay to several users of a bill at once (creator only)."""
    bill = check_bill_owner(split_data.bill_id, current_user, db)
    
    user_ids = [u.user_id for u in split_data.users]
    if len(set(user_ids)) != len(user_ids):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each user may appear only once in a split"
        )
    for user_id in user_ids:
        ensure_user_exists(user_id, db)
    
    try:
        bill_users = bill_user_service.split_bill(bill, split_data.users, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    return [build_bill_user_response(bu) for bu in bill_users]


@router.get("/bill/{bill_id}/users", response_model=List[BillUserResponse])
async def get_users_in_bill(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the participants of a bill."""
    check_bill_access(bill_id, current_user, db)
    return [build_bill_user_response(bu) for bu in bill_user_service.get_users_in_bill(bill_id, db)]


@router.get("/user/{user_id}/bills", response_model=List[BillUserResponse])
async def get_bills_of_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List a user's participations (self or admin)."""
    if current_user.id != user_id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )
    return [build_bill_user_response(bu) for bu in bill_user_service.get_bills_of_user(user_id, db)]


@router.put("/bill/{bill_id}/user/{user_id}/mark-paid", response_model=BillUserResponse)
async def mark_as_paid(
    bill_id: int,
    user_id: int,
    mark_data: MarkPaid,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a participant as paid (self, creator or admin)."""
    check_participant_edit(bill_id, user_id, current_user, db)
    bill_user = get_bill_user_or_404(bill_id, user_id, db)
    
    bill_user = bill_user_service.mark_as_paid(bill_user, db, payment_note=mark_data.payment_note)
    return build_bill_user_response(bill_user)


@router.put("/bill/{bill_id}/user/{user_id}", response_model=BillUserResponse)
async def update_bill_user(
    bill_id: int,
    user_id: int,
    update_data: BillUserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a participant's share or payment state."""
    share_fields = bool({"share_ratio", "amount_to_pay"} & update_data.model_fields_set)
    check_participant_edit(bill_id, user_id, current_user, db, share_fields=share_fields)
    bill_user = get_bill_user_or_404(bill_id, user_id, db)
    
    bill_user = bill_user_service.update_bill_user(bill_user, update_data, db)
    return build_bill_user_response(bill_user)


@router.delete("/bill/{bill_id}/user/{user_id}")
async def remove_user_from_bill(
    bill_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove a participant from a bill (creator only)."""
    check_bill_owner(bill_id, current_user, db)
    bill_user = get_bill_user_or_404(bill_id, user_id, db)
    
    try:
        bill_user_service.remove_user_from_bill(bill_user, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return {"message": "User removed from bill successfully"}


@router.get("/bill/{bill_id}/payment-stats", response_model=BillPaymentStats)
async def get_bill_payment_stats(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Paid/unpaid totals over the participants' amounts to pay."""
    check_bill_access(bill_id, current_user, db)
    return bill_user_service.get_bill_payment_stats(bill_id, db)
