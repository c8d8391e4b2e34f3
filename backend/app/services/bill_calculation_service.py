"""
Bill calculation service: per-participant obligations and settlement status.

For every active participant of a bill:
    due_amount     = share_ratio / sum(share_ratio) * bill total, in cents;
                     leftover cents go to the largest remainders so the
                     dues add up to the bill total
    prepaid_amount = amounts fronted for the bill's items
    paid_amount    = payments recorded against the bill
    net_amount     = due_amount - prepaid_amount - paid_amount
A participant is settled when net_amount <= 0.
"""
import logging
from datetime import datetime
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from decimal import Decimal
from app.core.utils import allocate_money, to_decimal
from app.models.bill import Bill, BillUser
from app.schemas.calculation import BillUserCalculation
from app.services.bill_service import get_bill_total
from app.services.bill_item_payer_service import get_total_prepaid_by_user_and_bill
from app.services.payment_service import get_total_paid_by_user_and_bill

logger = logging.getLogger(__name__)


class Transfer:
    """Represents a single transfer between users."""
    def __init__(self, from_user_id: int, to_user_id: int, amount: Decimal):
        self.from_user_id = from_user_id
        self.to_user_id = to_user_id
        self.amount = amount


def _active_bill_users(bill_id: int, db: Session, lock: bool = False) -> List[BillUser]:
    query = db.query(BillUser).filter(
        BillUser.bill_id == bill_id,
        BillUser.is_active.is_(True)
    ).order_by(BillUser.id.asc())
    if lock:
        query = query.with_for_update()
    return query.all()


def _calculate(bill_id: int, bill_users: List[BillUser], db: Session) -> List[BillUserCalculation]:
    bill = db.query(Bill).filter(Bill.id == bill_id).first()
    if not bill or not bill_users:
        return []
    
    share_ratios = [to_decimal(bu.share_ratio) for bu in bill_users]
    due_amounts = allocate_money(get_bill_total(bill, db), share_ratios)
    
    calculations = []
    for bill_user, share_ratio, due_amount in zip(bill_users, share_ratios, due_amounts):
        prepaid_amount = get_total_prepaid_by_user_and_bill(bill_user.user_id, bill_id, db)
        paid_amount = get_total_paid_by_user_and_bill(bill_user.user_id, bill_id, db)
        net_amount = due_amount - prepaid_amount - paid_amount
        
        calculations.append(BillUserCalculation(
            user_id=bill_user.user_id,
            bill_id=bill_id,
            share_ratio=share_ratio,
            due_amount=due_amount,
            prepaid_amount=prepaid_amount,
            paid_amount=paid_amount,
            net_amount=net_amount,
            is_settled=net_amount <= 0
        ))
    
    return calculations


def calculate_bill_user_obligations(bill_id: int, db: Session) -> List[BillUserCalculation]:
    """
    Calculate the obligation of every active participant in a bill.
    A bill without participants yields an empty list.
    """
    bill_users = _active_bill_users(bill_id, db)
    if not bill_users:
        logger.warning(f"Bill {bill_id} has no participants; nothing to calculate")
    return _calculate(bill_id, bill_users, db)


def calculate_user_obligation(user_id: int, bill_id: int, db: Session) -> Optional[BillUserCalculation]:
    """Calculate one participant's obligation, or None if not a participant."""
    for calculation in calculate_bill_user_obligations(bill_id, db):
        if calculation.user_id == user_id:
            return calculation
    return None


def _apply_settled_status(bill_user: BillUser, calculation: BillUserCalculation):
    if calculation.is_settled:
        if not bill_user.is_settled or not bill_user.settled_at:
            bill_user.settled_at = datetime.utcnow()
        bill_user.is_settled = True
    else:
        bill_user.is_settled = False
        bill_user.settled_at = None


def update_settled_status(user_id: int, bill_id: int, db: Session) -> Optional[BillUserCalculation]:
    """
    Persist is_settled/settled_at for one participant.
    Returns the calculation used, or None if the user is not a participant.
    """
    bill_users = _active_bill_users(bill_id, db, lock=True)
    calculations = _calculate(bill_id, bill_users, db)
    
    for bill_user, calculation in zip(bill_users, calculations):
        if bill_user.user_id == user_id:
            _apply_settled_status(bill_user, calculation)
            db.commit()
            logger.info(
                f"Bill {bill_id} user {user_id}: net {calculation.net_amount}, "
                f"settled={calculation.is_settled}"
            )
            return calculation
    
    db.rollback()
    return None


def update_all_settled_statuses(bill_id: int, db: Session) -> List[BillUserCalculation]:
    """
    Persist settlement status for every participant of a bill.
    Participant rows are locked and all statuses are written in one commit.
    """
    bill_users = _active_bill_users(bill_id, db, lock=True)
    calculations = _calculate(bill_id, bill_users, db)
    
    for bill_user, calculation in zip(bill_users, calculations):
        _apply_settled_status(bill_user, calculation)
    db.commit()
    
    settled_count = sum(1 for c in calculations if c.is_settled)
    logger.info(f"Bill {bill_id}: {settled_count}/{len(calculations)} participants settled")
    return calculations


def suggest_transfers(bill_id: int, db: Session) -> List[Transfer]:
    """
    Suggest transfers from participants who still owe (net > 0)
    to participants who are owed (net < 0).
    """
    calculations = calculate_bill_user_obligations(bill_id, db)
    # minimize_transfers works on "should receive" balances, the opposite sign of net_amount
    balances = [(c.user_id, -c.net_amount) for c in calculations]
    return minimize_transfers(balances)


def minimize_transfers(balances: List[Tuple[int, Decimal]]) -> List[Transfer]:
    """
    Minimize the number of transfers needed to settle debts.
    Uses a greedy algorithm: largest debtor pays largest creditor first.
    Balances are (user_id, amount); positive = should receive, negative = should pay.
    """
    creditors = [(uid, bal) for uid, bal in balances if bal > 0]
    debtors = [(uid, -bal) for uid, bal in balances if bal < 0]  # Stored as positive
    
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)
    
    transfers = []
    cred_idx = 0
    debt_idx = 0
    
    while cred_idx < len(creditors) and debt_idx < len(debtors):
        creditor_id, cred_amount = creditors[cred_idx]
        debtor_id, debt_amount = debtors[debt_idx]
        
        transfer_amount = min(cred_amount, debt_amount)
        transfers.append(Transfer(debtor_id, creditor_id, transfer_amount))
        
        creditors[cred_idx] = (creditor_id, cred_amount - transfer_amount)
        debtors[debt_idx] = (debtor_id, debt_amount - transfer_amount)
        
        if creditors[cred_idx][1] == 0:
            cred_idx += 1
        if debtors[debt_idx][1] == 0:
            debt_idx += 1
    
    return transfers
