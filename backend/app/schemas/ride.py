"""
Ride schemas.

Schemas for both ride creation paths, status updates, cancellation and
rating.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import Field

from backend.app.schemas.base import ApiModel
from backend.app.models.enums import VehicleType
from backend.app.models.ride_enums import RideStatus


class RideRequestCreate(ApiModel):
    """Passenger ride request. Used by POST /passengers/rides/request."""
    start_point: str = Field(..., min_length=1, max_length=255)
    end_point: str = Field(..., min_length=1, max_length=255)
    vehicle_type: VehicleType = Field(default=VehicleType.CAR)


class Location(ApiModel):
    """Address with coordinates. Only the address is stored."""
    address: str = Field(..., min_length=1, max_length=255)
    lat: float = 0.0
    lng: float = 0.0


class TrustedRideCreate(ApiModel):
    """
    Ride creation with caller-supplied data. Used by POST /rides.

    driverId may be a number, a numeric string or anything else; values that
    do not name an existing driver fall back to any driver.
    """
    passenger_id: int
    driver_id: Optional[Union[int, str]] = None
    pickup: Location
    destination: Location
    distance: Optional[float] = Field(default=None, gt=0, description="km")
    duration: Optional[int] = Field(default=None, gt=0, description="minutes")
    fare: Optional[float] = Field(default=None, ge=0)
    vehicle_type: VehicleType = Field(default=VehicleType.CAR)


class RideStatusUpdate(ApiModel):
    status: RideStatus


class RateRideRequest(ApiModel):
    rating: float = Field(..., ge=0, le=5)
    feedback: Optional[str] = Field(default=None, max_length=1000)


class RideDetailResponse(ApiModel):
    """Ride joined with driver, passenger, vehicle and route."""
    id: int
    passenger_id: int
    driver_id: int
    vehicle_id: Optional[int] = None
    fare: float
    status: RideStatus
    passenger_name: str
    driver_name: str
    vehicle_model: Optional[str] = None
    start_point: str
    end_point: str
    distance: float
    duration: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class TrustedRideResponse(ApiModel):
    """Ride as the web client stores it: lowercase status, pickup/destination objects."""
    id: int
    passenger_id: int
    driver_id: int
    vehicle_id: Optional[int] = None
    fare: float
    status: str
    created_at: datetime
    pickup: Location
    destination: Location
    distance: float
    duration: int


class RideStatusResponse(ApiModel):
    message: str
    ride_id: int
    status: RideStatus


class RatingResponse(ApiModel):
    message: str
    ride_id: int
    rating: float
    driver_avg_rating: float
    passenger_avg_rating_given: float
