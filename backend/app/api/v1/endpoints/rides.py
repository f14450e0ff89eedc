"""
Ride API Endpoints.

Trusted ride creation, status transitions and ride visibility for all
parties. Passenger-initiated requests live under /passengers.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.models.enums import AccountType
from backend.app.schemas.ride import (
    TrustedRideCreate, TrustedRideResponse, RideStatusUpdate,
    RideStatusResponse, RideDetailResponse
)
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_role, is_admin
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.rides.ride_service import RideService, RideRequest, TRUSTED
from backend.app.services.audit import log_account_action, AuditAction

router = APIRouter(prefix="/rides", tags=["Rides"])


@router.post("", response_model=TrustedRideResponse, status_code=status.HTTP_201_CREATED)
async def create_ride(
    ride_data: TrustedRideCreate,
    current_user: dict = Depends(require_role([AccountType.ADMIN, AccountType.PASSENGER])),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a ride from caller-supplied driver, distance, duration and fare.

    Admins may create rides for any passenger; passengers only for
    themselves. The route is always recorded fresh, the driver falls back to
    any existing driver when the given one is unknown, and the ride starts
    as Accepted.
    """
    if not is_admin(current_user) and ride_data.passenger_id != current_user["user_id"]:
        raise ResourceNotFoundError("Passenger", ride_data.passenger_id)

    ride = await RideService.create_ride(
        db,
        RideRequest(
            passenger_id=ride_data.passenger_id,
            start_point=ride_data.pickup.address,
            end_point=ride_data.destination.address,
            vehicle_type=ride_data.vehicle_type,
            driver_id=ride_data.driver_id,
            distance_km=ride_data.distance,
            duration_min=ride_data.duration,
            fare=ride_data.fare
        ),
        TRUSTED
    )
    await db.commit()

    detail = await RideService.get_ride_detail(db, ride.id)

    await log_account_action(
        db, current_user, AuditAction.RIDE_CREATED,
        target_id=ride.id,
        metadata={
            "passenger_id": ride.passenger_id,
            "driver_id": ride.driver_id,
            "requested_driver_id": str(ride_data.driver_id) if ride_data.driver_id is not None else None,
            "fare": ride.fare
        }
    )

    # Coordinates are not stored; echo what the caller sent
    return TrustedRideResponse(
        id=detail["id"],
        passenger_id=detail["passenger_id"],
        driver_id=detail["driver_id"],
        vehicle_id=detail["vehicle_id"],
        fare=detail["fare"],
        status=detail["status"].value.lower(),
        created_at=detail["created_at"],
        pickup=ride_data.pickup.model_copy(update={"address": detail["start_point"]}),
        destination=ride_data.destination.model_copy(update={"address": detail["end_point"]}),
        distance=detail["distance"],
        duration=detail["duration"]
    )


@router.put("/{ride_id}/status", response_model=RideStatusResponse)
async def update_ride_status(
    status_data: RideStatusUpdate,
    ride_id: int = Path(..., description="Ride ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a ride to a new status.

    - Accepted / Ongoing / Completed: assigned driver or admin
    - Cancelled: owning passenger or admin

    Raises:
        404: Ride not found or caller is not a party to it
        409: Not a legal transition from the current status
        403: Caller's role may not request this status
    """
    ride = await RideService.update_status(db, ride_id, status_data.status, current_user)
    await db.commit()

    await log_account_action(
        db, current_user, AuditAction.RIDE_STATUS_CHANGED,
        target_id=ride.id,
        metadata={"status": ride.status.value}
    )

    return RideStatusResponse(
        message=f"Ride status updated to {ride.status.value}",
        ride_id=ride.id,
        status=ride.status
    )


@router.get("/active", response_model=List[RideDetailResponse])
async def list_active_rides(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Ongoing rides. Admins see all; drivers and passengers see their own."""
    return await RideService.get_active_rides(db, current_user)


@router.get("/{ride_id}", response_model=RideDetailResponse)
async def get_ride(
    ride_id: int = Path(..., description="Ride ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await RideService.get_visible_ride(db, ride_id, current_user)
