"""
Driver and vehicle schemas.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from backend.app.schemas.base import ApiModel
from backend.app.models.enums import DriverStatus, VehicleType


class DriverProfileResponse(ApiModel):
    id: int
    name: str
    email: str
    phone: str
    license_no: str
    status: DriverStatus
    join_date: date
    avg_rating: Optional[float] = None
    vehicle_count: int = 0
    created_at: datetime


class DriverStatusUpdate(ApiModel):
    status: DriverStatus


class DriverStatusResponse(ApiModel):
    message: str
    status: DriverStatus


class VehicleCreate(ApiModel):
    """Schema for adding a vehicle. The type is sent as ``type``."""
    model: str = Field(..., min_length=1, max_length=50)
    capacity: int = Field(..., gt=0, description="Seats, must be positive")
    vehicle_type: VehicleType = Field(..., alias="type")


class VehicleResponse(ApiModel):
    id: int
    driver_id: int
    model: str
    capacity: int
    vehicle_type: VehicleType = Field(..., alias="type")
    created_at: datetime
