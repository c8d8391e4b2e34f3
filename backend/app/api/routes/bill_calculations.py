"""
Bill settlement calculation routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.schemas.calculation import BillUserCalculation, BillTransfers, Transfer
from app.services import bill_calculation_service
from app.api.dependencies import get_current_user
from app.api.routes.bills import check_bill_access

router = APIRouter(prefix="/bill-calculations", tags=["bill-calculations"])


@router.get("/bill/{bill_id}", response_model=List[BillUserCalculation])
async def calculate_bill_user_obligations(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Obligation of every participant in a bill."""
    check_bill_access(bill_id, current_user, db)
    return bill_calculation_service.calculate_bill_user_obligations(bill_id, db)


@router.get("/bill/{bill_id}/user/{user_id}", response_model=BillUserCalculation)
async def calculate_user_obligation(
    bill_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Obligation of one participant in a bill."""
    check_bill_access(bill_id, current_user, db)
    
    calculation = bill_calculation_service.calculate_user_obligation(user_id, bill_id, db)
    if not calculation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User is not a participant of this bill"
        )
    return calculation


@router.post("/bill/{bill_id}/user/{user_id}/update-settled", response_model=BillUserCalculation)
async def update_settled_status(
    bill_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Recompute and persist one participant's settlement status."""
    check_bill_access(bill_id, current_user, db)
    
    calculation = bill_calculation_service.update_settled_status(user_id, bill_id, db)
    if not calculation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User is not a participant of this bill"
        )
    return calculation


@router.post("/bill/{bill_id}/update-all-settled", response_model=List[BillUserCalculation])
async def update_all_settled_statuses(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Recompute and persist every participant's settlement status."""
    check_bill_access(bill_id, current_user, db)
    return bill_calculation_service.update_all_settled_statuses(bill_id, db)


@router.get("/bill/{bill_id}/transfers", response_model=BillTransfers)
async def get_suggested_transfers(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Suggested transfers from participants who owe to those who are owed."""
    bill = check_bill_access(bill_id, current_user, db)
    
    transfers = bill_calculation_service.suggest_transfers(bill_id, db)
    return BillTransfers(
        bill_id=bill_id,
        currency_code=bill.currency_code,
        transfers=[
            Transfer(from_user_id=t.from_user_id, to_user_id=t.to_user_id, amount=t.amount)
            for t in transfers
        ]
    )
