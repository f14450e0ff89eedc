"""
Payment Service (Domain Logic).

Records the payment for a ride and handles refunds. There is no real
gateway: SimulatedPaymentGateway approves every charge, and calls to it go
through the payment gateway circuit breaker so that a real integration can
be dropped in behind the same seam.
"""

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from backend.app.models.payment import Payment
from backend.app.models.ride import Ride
from backend.app.models.payment_enums import PaymentMode, PaymentStatus
from backend.app.core.guards import OwnershipGuard
from backend.app.core.reliability import payment_gateway_breaker, CircuitOpenError
from backend.app.core.exceptions import (
    ResourceNotFoundError,
    PaymentAlreadyExistsError,
    PaymentNotRefundableError,
    PaymentGatewayUnavailableError,
)

logger = logging.getLogger(__name__)
ownership_guard = OwnershipGuard()


@dataclass(frozen=True)
class ChargeResult:
    status: PaymentStatus
    reference: str


class SimulatedPaymentGateway:
    """Approves every charge."""

    async def charge(self, ride_id: int, amount: float, mode: PaymentMode) -> ChargeResult:
        return ChargeResult(status=PaymentStatus.SUCCESSFUL, reference=f"SIM-{ride_id}")


payment_gateway = SimulatedPaymentGateway()


async def _visible_ride(db: AsyncSession, ride_id: int, current_user: dict) -> Ride:
    """The ride, if the caller is its passenger or an admin."""
    ride = await db.get(Ride, ride_id)
    if not ride:
        raise ResourceNotFoundError("Ride", ride_id)

    # Drivers do not pay for rides
    ownership_guard.enforce(ride.passenger_id, None, current_user, "Ride", ride_id)
    return ride


class PaymentService:

    @staticmethod
    async def process_payment(
        db: AsyncSession,
        ride_id: int,
        amount: float,
        mode: PaymentMode,
        current_user: dict,
        gateway: SimulatedPaymentGateway = payment_gateway
    ) -> Payment:
        """
        Charge and record the payment for a ride.

        The amount is taken as given; it is not compared with the ride fare.

        Raises:
            ResourceNotFoundError: unknown ride, or not the caller's
            PaymentAlreadyExistsError: the ride already has a payment
            PaymentGatewayUnavailableError: circuit breaker is open
        """
        ride = await _visible_ride(db, ride_id, current_user)

        existing = await db.execute(select(Payment.id).where(Payment.ride_id == ride.id))
        if existing.first() is not None:
            raise PaymentAlreadyExistsError(ride.id)

        try:
            charge = await payment_gateway_breaker.call(gateway.charge, ride.id, amount, mode)
        except CircuitOpenError as exc:
            logger.warning("Payment gateway circuit open, rejecting payment for ride %s", ride.id)
            raise PaymentGatewayUnavailableError() from exc

        payment = Payment(
            ride_id=ride.id,
            amount=amount,
            mode=mode,
            status=charge.status,
        )
        db.add(payment)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise PaymentAlreadyExistsError(ride.id) from exc

        await db.refresh(payment)
        logger.info(
            "Payment %s recorded for ride %s: %.2f via %s (%s, ref %s)",
            payment.id, ride.id, amount, mode.value, charge.status.value, charge.reference
        )
        return payment

    @staticmethod
    async def refund_payment(db: AsyncSession, payment_id: int, current_user: dict) -> Payment:
        """
        Flip a Successful payment to Refunded.

        Raises:
            ResourceNotFoundError: unknown payment, or not the caller's
            PaymentNotRefundableError: payment is not Successful
        """
        payment = await db.get(Payment, payment_id)
        if not payment:
            raise ResourceNotFoundError("Payment", payment_id)

        ride = await db.get(Ride, payment.ride_id)
        ownership_guard.enforce(ride.passenger_id, None, current_user, "Payment", payment_id)

        if payment.status != PaymentStatus.SUCCESSFUL:
            raise PaymentNotRefundableError(payment.id, payment.status.value)

        result = await db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status == PaymentStatus.SUCCESSFUL)
            .values(status=PaymentStatus.REFUNDED)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.refresh(payment)
            raise PaymentNotRefundableError(payment.id, payment.status.value)

        await db.refresh(payment)
        logger.info("Payment %s for ride %s refunded", payment.id, payment.ride_id)
        return payment

    @staticmethod
    async def get_payment_history(db: AsyncSession, passenger_id: int) -> List:
        """Payments for the passenger's rides, newest ride first."""
        result = await db.execute(
            select(
                Payment.id.label("payment_id"),
                Payment.ride_id,
                Payment.amount,
                Payment.mode,
                Payment.status,
                Payment.payment_date,
                Ride.created_at.label("ride_date"),
            )
            .join(Ride, Payment.ride_id == Ride.id)
            .where(Ride.passenger_id == passenger_id)
            .order_by(Ride.created_at.desc(), Payment.id.desc())
        )
        return [dict(row) for row in result.mappings().all()]
