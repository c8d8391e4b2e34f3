"""
Payment routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.db.session import get_db
from app.models.user import User
from app.models.payment import Payment
from app.schemas.payment import PaymentCreate, PaymentUpdate, PaymentResponse, PaymentMethodStats
from app.services import payment_service
from app.api.dependencies import get_current_user
from app.api.routes.bills import check_bill_access

router = APIRouter(prefix="/payments", tags=["payments"])


def get_payment_or_404(payment_id: int, db: Session) -> Payment:
    """Load a payment or raise 404."""
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    return payment


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a payment against a bill."""
    check_bill_access(payment_data.bill_id, current_user, db)
    
    try:
        return payment_service.create_payment(payment_data, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/bill/{bill_id}", response_model=List[PaymentResponse])
async def get_payments_by_bill(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List payments for a bill, newest first."""
    check_bill_access(bill_id, current_user, db)
    return payment_service.get_payments_by_bill(bill_id, db)


@router.get("/bill/{bill_id}/user/{user_id}", response_model=List[PaymentResponse])
async def get_payments_by_user_and_bill(
    bill_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List one user's payments for a bill."""
    check_bill_access(bill_id, current_user, db)
    return payment_service.get_payments_by_payer_and_bill(user_id, bill_id, db)


@router.get("/bill/{bill_id}/stats", response_model=List[PaymentMethodStats])
async def get_payment_stats(
    bill_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Payment count and total per method for a bill."""
    check_bill_access(bill_id, current_user, db)
    return payment_service.get_payment_stats_by_method(bill_id, db)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a payment."""
    payment = get_payment_or_404(payment_id, db)
    check_bill_access(payment.bill_id, current_user, db)
    return payment_service.update_payment(payment, payment_data, db)


@router.delete("/{payment_id}")
async def delete_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a payment."""
    payment = get_payment_or_404(payment_id, db)
    check_bill_access(payment.bill_id, current_user, db)
    
    db.delete(payment)
    db.commit()
    
    return {"message": "Payment deleted successfully"}
