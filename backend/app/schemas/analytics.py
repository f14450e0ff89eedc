"""
Analytics schemas for the admin reporting endpoints.
"""

from datetime import date, datetime
from typing import Optional

from backend.app.schemas.base import ApiModel


class ActiveDriverSummary(ApiModel):
    """Active drivers with their ride count, rating and fleet size."""
    driver_id: int
    full_name: str
    join_date: Optional[date] = None
    total_rides: int
    avg_rating: Optional[float] = None
    vehicle_count: int


class PassengerActivity(ApiModel):
    passenger_id: int
    full_name: str
    email: str
    total_rides: int
    total_spent: float
    last_ride_date: Optional[datetime] = None


class DailyRideStats(ApiModel):
    ride_date: date
    total_rides: int
    completed_rides: int
    cancelled_rides: int
    total_revenue: float
    average_fare: float


class PopularRoute(ApiModel):
    route_id: int
    start_point: str
    end_point: str
    usage_count: int
    average_fare: float
    last_used: Optional[datetime] = None


class PaymentMethodStats(ApiModel):
    mode: str
    total_transactions: int
    successful_transactions: int
    failed_transactions: int
    total_amount: float
    average_amount: float


class DriverPerformance(ApiModel):
    driver_id: int
    full_name: str
    total_rides: int
    avg_rating: Optional[float] = None
    accident_count: int
    critical_accidents: int


class HighPerformingDriver(ApiModel):
    driver_id: int
    full_name: str
    total_rides: int
    avg_rating: float


class RouteIncidents(ApiModel):
    route_id: int
    start_point: str
    end_point: str
    total_accidents: int
    critical_accidents: int
    open_claims: int


class TrafficImpact(ApiModel):
    """Estimated vs. observed ride duration on routes with traffic reports."""
    route_id: int
    start_point: str
    end_point: str
    estimated_duration: int
    actual_avg_duration: float
    severity: str
    ride_count: int
