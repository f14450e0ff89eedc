"""
Payment API Endpoints.

Record a ride's payment, refund it, and list a passenger's payments.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.models.enums import AccountType
from backend.app.models.payment import Payment
from backend.app.schemas.payment import (
    PaymentCreate, PaymentCreateResponse, RefundResponse, PaymentHistoryItem
)
from backend.app.core.guards import require_role, require_passenger
from backend.app.domain.payments.payment_service import PaymentService
from backend.app.services.audit import log_account_action, AuditAction

router = APIRouter(prefix="/payments", tags=["Payments"])

payer = require_role([AccountType.PASSENGER, AccountType.ADMIN])


def _payment_fields(payment: Payment) -> dict:
    return {
        "payment_id": payment.id,
        "ride_id": payment.ride_id,
        "amount": payment.amount,
        "mode": payment.mode,
        "status": payment.status,
        "payment_date": payment.payment_date,
    }


@router.post("", response_model=PaymentCreateResponse, status_code=status.HTTP_201_CREATED)
async def process_payment(
    payment_data: PaymentCreate,
    current_user: dict = Depends(payer),
    db: AsyncSession = Depends(get_db)
):
    """
    Record the payment for a ride. The simulated gateway approves every charge.

    Raises:
        404: Ride not found or not the caller's
        409: Ride already has a payment
        503: Payment gateway unavailable
    """
    payment = await PaymentService.process_payment(
        db, payment_data.ride_id, payment_data.amount, payment_data.mode, current_user
    )
    await db.commit()

    await log_account_action(
        db, current_user, AuditAction.PAYMENT_PROCESSED,
        target_id=payment.id,
        metadata={"ride_id": payment.ride_id, "amount": payment.amount, "mode": payment.mode.value}
    )

    return PaymentCreateResponse(**_payment_fields(payment))


@router.put("/{payment_id}/refund", response_model=RefundResponse)
async def refund_payment(
    payment_id: int = Path(..., description="Payment ID"),
    current_user: dict = Depends(payer),
    db: AsyncSession = Depends(get_db)
):
    """
    Refund a Successful payment.

    Raises:
        404: Payment not found or not the caller's
        409: Payment is not Successful (e.g. already refunded)
    """
    payment = await PaymentService.refund_payment(db, payment_id, current_user)
    await db.commit()

    await log_account_action(
        db, current_user, AuditAction.PAYMENT_REFUNDED,
        target_id=payment.id,
        metadata={"ride_id": payment.ride_id}
    )

    return RefundResponse(**_payment_fields(payment))


@router.get("/history", response_model=List[PaymentHistoryItem])
async def payment_history(
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    return await PaymentService.get_payment_history(db, current_user["user_id"])
