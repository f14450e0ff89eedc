"""
Driver API Endpoints.

Own profile, availability status, vehicles and assigned rides.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from backend.app.db.session import get_db
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.models.ride_enums import RideStatus
from backend.app.schemas.auth import ProfileUpdate
from backend.app.schemas.driver import (
    DriverProfileResponse, DriverStatusUpdate, DriverStatusResponse,
    VehicleCreate, VehicleResponse
)
from backend.app.schemas.ride import RideDetailResponse
from backend.app.core.guards import require_driver
from backend.app.core.exceptions import ResourceNotFoundError, DuplicateAccountError
from backend.app.domain.rides.ride_service import RideService
from backend.app.services.accounts import phone_in_use
from backend.app.services.audit import log_account_action, AuditAction

router = APIRouter(prefix="/drivers", tags=["Drivers"])


async def _get_driver(db: AsyncSession, driver_id: int) -> Driver:
    driver = await db.get(Driver, driver_id)
    if not driver:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


async def _profile(db: AsyncSession, driver: Driver) -> DriverProfileResponse:
    vehicle_count = (await db.execute(
        select(func.count(Vehicle.id)).where(Vehicle.driver_id == driver.id)
    )).scalar() or 0

    return DriverProfileResponse(
        id=driver.id,
        name=driver.full_name,
        email=driver.email,
        phone=driver.phone,
        license_no=driver.license_no,
        status=driver.status,
        join_date=driver.join_date,
        avg_rating=driver.avg_rating,
        vehicle_count=vehicle_count,
        created_at=driver.created_at
    )


@router.get("/profile", response_model=DriverProfileResponse)
async def get_profile(
    current_user: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    driver = await _get_driver(db, current_user["user_id"])
    return await _profile(db, driver)


@router.put("/profile", response_model=DriverProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    """Update name and phone."""
    driver = await _get_driver(db, current_user["user_id"])

    if await phone_in_use(db, Driver, profile_data.phone, exclude_id=driver.id):
        raise DuplicateAccountError("phone")

    driver.full_name = profile_data.name
    driver.phone = profile_data.phone
    await db.commit()
    await db.refresh(driver)

    await log_account_action(db, current_user, AuditAction.PROFILE_UPDATED, target_id=driver.id)

    return await _profile(db, driver)


@router.put("/status", response_model=DriverStatusResponse)
async def update_status(
    status_data: DriverStatusUpdate,
    current_user: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    """
    Set own availability. Rides already in progress are not affected.
    """
    driver = await _get_driver(db, current_user["user_id"])
    previous = driver.status

    driver.status = status_data.status
    await db.commit()

    await log_account_action(
        db, current_user, AuditAction.DRIVER_STATUS_CHANGED,
        target_id=driver.id,
        metadata={"from": previous.value, "to": status_data.status.value}
    )

    return DriverStatusResponse(message="Driver status updated", status=status_data.status)


@router.post("/vehicles", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
async def add_vehicle(
    vehicle_data: VehicleCreate,
    current_user: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    vehicle = Vehicle(
        driver_id=current_user["user_id"],
        model=vehicle_data.model,
        capacity=vehicle_data.capacity,
        vehicle_type=vehicle_data.vehicle_type
    )
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    await log_account_action(
        db, current_user, AuditAction.VEHICLE_ADDED,
        target_id=vehicle.id,
        metadata={"model": vehicle.model, "type": vehicle.vehicle_type.value}
    )

    return VehicleResponse.model_validate(vehicle)


@router.get("/vehicles", response_model=List[VehicleResponse])
async def list_vehicles(
    current_user: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Vehicle).where(Vehicle.driver_id == current_user["user_id"]).order_by(Vehicle.id)
    )
    return [VehicleResponse.model_validate(vehicle) for vehicle in result.scalars().all()]


@router.get("/rides", response_model=List[RideDetailResponse])
async def list_assigned_rides(
    ride_status: Optional[RideStatus] = Query(None, alias="status", description="Filter by ride status"),
    current_user: dict = Depends(require_driver),
    db: AsyncSession = Depends(get_db)
):
    """Rides assigned to the caller, newest first."""
    return await RideService.get_driver_rides(db, current_user["user_id"], ride_status)
