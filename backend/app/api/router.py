"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from app.api.routes import (
    auth, users, bills, bill_items, bill_item_payers,
    bill_users, payments, bill_calculations
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(bills.router)
api_router.include_router(bill_items.router)
api_router.include_router(bill_item_payers.router)
api_router.include_router(bill_users.router)
api_router.include_router(payments.router)
api_router.include_router(bill_calculations.router)
