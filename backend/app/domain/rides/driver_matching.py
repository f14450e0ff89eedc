"""
Driver and vehicle resolution for new rides.

Matching is first-fit: the first Active driver owning a vehicle of
the requested type wins. There is no ranking, proximity or load balancing.
"""

import logging
import secrets
from typing import Any, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.exceptions import NoDriversAvailableError
from backend.app.core.security import get_password_hash
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.models.enums import DriverStatus, VehicleType

logger = logging.getLogger(__name__)

PLACEHOLDER_DRIVER = {
    "full_name": "System Driver",
    "email": "driver@system.com",
    "phone": "0000000000",
    "license_no": "SYS-LIC-001",
}
DEFAULT_VEHICLE_MODEL = "Default Vehicle"
DEFAULT_VEHICLE_CAPACITY = 4


async def find_available_driver(db: AsyncSession, vehicle_type: VehicleType) -> Tuple[Driver, Vehicle]:
    """
    Pick the first Active driver who owns a vehicle of ``vehicle_type``.

    Raises:
        NoDriversAvailableError: no driver matches
    """
    result = await db.execute(
        select(Driver, Vehicle)
        .join(Vehicle, Vehicle.driver_id == Driver.id)
        .where(
            Driver.status == DriverStatus.ACTIVE,
            Vehicle.vehicle_type == vehicle_type
        )
        .order_by(Driver.id, Vehicle.id)
        .limit(1)
    )
    row = result.first()

    if row is None:
        raise NoDriversAvailableError(vehicle_type.value)

    driver, vehicle = row
    return driver, vehicle


def _parse_driver_id(driver_id: Any) -> Optional[int]:
    """Accept ints and numeric strings; anything else means "no preference"."""
    if isinstance(driver_id, bool):
        return None
    if isinstance(driver_id, int):
        return driver_id
    if isinstance(driver_id, str) and driver_id.strip().isdigit():
        return int(driver_id.strip())
    return None


async def _create_placeholder_driver(db: AsyncSession) -> Driver:
    driver = Driver(
        hashed_password=get_password_hash(secrets.token_urlsafe(16)),
        status=DriverStatus.ACTIVE,
        **PLACEHOLDER_DRIVER
    )
    db.add(driver)
    await db.flush()

    logger.warning("No drivers registered; created placeholder driver %s", driver.id)
    return driver


async def resolve_trusted_driver(db: AsyncSession, driver_id: Any) -> Driver:
    """
    Resolve the driver for the trusted creation path.

    The caller's driver id is used when it names an existing driver.
    Otherwise any existing driver is used, and if there are none a
    placeholder driver is created.
    """
    requested_id = _parse_driver_id(driver_id)

    if requested_id is not None:
        driver = await db.get(Driver, requested_id)
        if driver:
            return driver
        logger.info("Driver %s not found, falling back to any existing driver", requested_id)
    else:
        logger.info("Driver id %r is not numeric, falling back to any existing driver", driver_id)

    result = await db.execute(select(Driver).order_by(Driver.id).limit(1))
    driver = result.scalar_one_or_none()
    if driver:
        return driver

    return await _create_placeholder_driver(db)


async def resolve_driver_vehicle(db: AsyncSession, driver: Driver, vehicle_type: VehicleType) -> Vehicle:
    """
    The driver's first registered vehicle, or a default one created on the spot.
    """
    result = await db.execute(
        select(Vehicle).where(Vehicle.driver_id == driver.id).order_by(Vehicle.id).limit(1)
    )
    vehicle = result.scalar_one_or_none()
    if vehicle:
        return vehicle

    vehicle = Vehicle(
        driver_id=driver.id,
        model=DEFAULT_VEHICLE_MODEL,
        capacity=DEFAULT_VEHICLE_CAPACITY,
        vehicle_type=vehicle_type,
    )
    db.add(vehicle)
    await db.flush()

    logger.info("Created default %s vehicle %s for driver %s", vehicle_type.value, vehicle.id, driver.id)
    return vehicle
