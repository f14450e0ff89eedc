"""
Passenger API Endpoints.

Own profile, ride requests, ride history, cancellation and rating.
Every endpoint is scoped to the authenticated passenger.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.models.passenger import Passenger
from backend.app.schemas.auth import ProfileUpdate
from backend.app.schemas.passenger import PassengerProfileResponse
from backend.app.schemas.ride import (
    RideRequestCreate, RideDetailResponse, RideStatusResponse,
    RateRideRequest, RatingResponse
)
from backend.app.core.guards import require_passenger
from backend.app.core.exceptions import ResourceNotFoundError, DuplicateAccountError
from backend.app.domain.rides.ride_service import RideService, RideRequest, PASSENGER_REQUEST
from backend.app.services.accounts import phone_in_use
from backend.app.services.audit import log_account_action, AuditAction

router = APIRouter(prefix="/passengers", tags=["Passengers"])


def _profile(passenger: Passenger) -> PassengerProfileResponse:
    return PassengerProfileResponse(
        id=passenger.id,
        name=passenger.full_name,
        email=passenger.email,
        phone=passenger.phone,
        avg_rating_given=passenger.avg_rating_given,
        created_at=passenger.created_at
    )


async def _get_passenger(db: AsyncSession, passenger_id: int) -> Passenger:
    passenger = await db.get(Passenger, passenger_id)
    if not passenger:
        raise ResourceNotFoundError("Passenger", passenger_id)
    return passenger


@router.get("/profile", response_model=PassengerProfileResponse)
async def get_profile(
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    passenger = await _get_passenger(db, current_user["user_id"])
    return _profile(passenger)


@router.put("/profile", response_model=PassengerProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    """Update name and phone. Email and password cannot be changed here."""
    passenger = await _get_passenger(db, current_user["user_id"])

    if await phone_in_use(db, Passenger, profile_data.phone, exclude_id=passenger.id):
        raise DuplicateAccountError("phone")

    passenger.full_name = profile_data.name
    passenger.phone = profile_data.phone
    await db.commit()
    await db.refresh(passenger)

    await log_account_action(db, current_user, AuditAction.PROFILE_UPDATED, target_id=passenger.id)

    return _profile(passenger)


@router.get("/rides", response_model=List[RideDetailResponse])
async def get_ride_history(
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    """Own rides, newest first."""
    return await RideService.get_passenger_history(db, current_user["user_id"])


@router.post("/rides/request", response_model=RideDetailResponse, status_code=status.HTTP_201_CREATED)
async def request_ride(
    ride_data: RideRequestCreate,
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    """
    Request a ride.

    The route is reused for a repeated (start, end) pair, the first Active
    driver with a vehicle of the requested type is assigned, and the fare is
    base + distance * per-km rate. The ride starts as Requested.

    Raises:
        404: No drivers available
    """
    ride = await RideService.create_ride(
        db,
        RideRequest(
            passenger_id=current_user["user_id"],
            start_point=ride_data.start_point,
            end_point=ride_data.end_point,
            vehicle_type=ride_data.vehicle_type
        ),
        PASSENGER_REQUEST
    )
    await db.commit()

    detail = await RideService.get_ride_detail(db, ride.id)

    await log_account_action(
        db, current_user, AuditAction.RIDE_REQUESTED,
        target_id=ride.id,
        metadata={"fare": ride.fare, "driver_id": ride.driver_id, "vehicle_type": ride_data.vehicle_type.value}
    )

    return detail


@router.put("/rides/{ride_id}/cancel", response_model=RideStatusResponse)
async def cancel_ride(
    ride_id: int = Path(..., description="Ride ID"),
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    """
    Cancel an own ride that is not yet Completed or Cancelled.

    Raises:
        404: Ride not found or not the caller's
        409: Ride already terminal
    """
    ride = await RideService.cancel_ride(db, ride_id, current_user["user_id"])
    await db.commit()

    await log_account_action(db, current_user, AuditAction.RIDE_CANCELLED, target_id=ride.id)

    return RideStatusResponse(message="Ride cancelled successfully", ride_id=ride.id, status=ride.status)


@router.post("/rides/{ride_id}/rate", response_model=RatingResponse)
async def rate_ride(
    rating_data: RateRideRequest,
    ride_id: int = Path(..., description="Ride ID"),
    current_user: dict = Depends(require_passenger),
    db: AsyncSession = Depends(get_db)
):
    """
    Rate a completed ride (once).

    Raises:
        404: Ride not found or not the caller's
        409: Ride not completed, or already rated
    """
    result = await RideService.rate_ride(
        db, ride_id, current_user["user_id"], rating_data.rating, rating_data.feedback
    )
    await db.commit()

    await log_account_action(
        db, current_user, AuditAction.RIDE_RATED,
        target_id=ride_id,
        metadata={"rating": rating_data.rating}
    )

    return RatingResponse(
        message="Thank you for your feedback!",
        ride_id=ride_id,
        rating=rating_data.rating,
        driver_avg_rating=result.driver_avg_rating,
        passenger_avg_rating_given=result.passenger_avg_rating_given
    )
