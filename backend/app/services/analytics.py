"""
Analytics Service.

Handles data aggregation for the admin reporting endpoints.
Focused on READ-ONLY operations.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case, distinct, and_

from backend.app.models.driver import Driver
from backend.app.models.passenger import Passenger
from backend.app.models.vehicle import Vehicle
from backend.app.models.ride import Ride
from backend.app.models.route import Route
from backend.app.models.payment import Payment
from backend.app.models.feedback import Feedback
from backend.app.models.accident import Accident
from backend.app.models.traffic_report import TrafficReport
from backend.app.models.enums import DriverStatus
from backend.app.models.ride_enums import RideStatus
from backend.app.models.payment_enums import PaymentStatus
from backend.app.models.incident_enums import AccidentSeverity, ClaimStatus
from backend.app.schemas.analytics import (
    ActiveDriverSummary, PassengerActivity, DailyRideStats, PopularRoute,
    PaymentMethodStats, DriverPerformance, HighPerformingDriver,
    RouteIncidents, TrafficImpact
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AnalyticsService:

    @staticmethod
    async def get_active_drivers_summary(db: AsyncSession) -> List[ActiveDriverSummary]:
        """Active drivers with rides taken, mean feedback rating and vehicle count."""
        avg_rating = func.avg(Feedback.rating).label("avg_rating")
        stmt = select(
            Driver.id,
            Driver.full_name,
            Driver.join_date,
            func.count(distinct(Ride.id)).label("total_rides"),
            avg_rating,
            func.count(distinct(Vehicle.id)).label("vehicle_count")
        ).outerjoin(Ride, Ride.driver_id == Driver.id)\
         .outerjoin(Feedback, Feedback.ride_id == Ride.id)\
         .outerjoin(Vehicle, Vehicle.driver_id == Driver.id)\
         .where(Driver.status == DriverStatus.ACTIVE)\
         .group_by(Driver.id, Driver.full_name, Driver.join_date)\
         .order_by(avg_rating.desc().nulls_last(), Driver.id)

        results = await db.execute(stmt)

        return [
            ActiveDriverSummary(
                driver_id=row.id,
                full_name=row.full_name,
                join_date=row.join_date,
                total_rides=row.total_rides,
                avg_rating=row.avg_rating,
                vehicle_count=row.vehicle_count
            )
            for row in results
        ]

    @staticmethod
    async def get_passenger_activity(db: AsyncSession) -> List[PassengerActivity]:
        total_rides = func.count(distinct(Ride.id)).label("total_rides")
        stmt = select(
            Passenger.id,
            Passenger.full_name,
            Passenger.email,
            total_rides,
            func.coalesce(func.sum(Ride.fare), 0).label("total_spent"),
            func.max(Ride.created_at).label("last_ride_date")
        ).outerjoin(Ride, Ride.passenger_id == Passenger.id)\
         .group_by(Passenger.id, Passenger.full_name, Passenger.email)\
         .order_by(total_rides.desc(), Passenger.id)

        results = await db.execute(stmt)

        return [
            PassengerActivity(
                passenger_id=row.id,
                full_name=row.full_name,
                email=row.email,
                total_rides=row.total_rides,
                total_spent=row.total_spent,
                last_ride_date=row.last_ride_date
            )
            for row in results
        ]

    @staticmethod
    async def get_daily_ride_stats(db: AsyncSession) -> List[DailyRideStats]:
        """Per-day totals, newest day first."""
        ride_date = func.date(Ride.created_at).label("ride_date")
        stmt = select(
            ride_date,
            func.count(Ride.id).label("total_rides"),
            func.sum(case((Ride.status == RideStatus.COMPLETED, 1), else_=0)).label("completed_rides"),
            func.sum(case((Ride.status == RideStatus.CANCELLED, 1), else_=0)).label("cancelled_rides"),
            func.sum(Ride.fare).label("total_revenue"),
            func.avg(Ride.fare).label("average_fare")
        ).group_by(ride_date).order_by(ride_date.desc())

        results = await db.execute(stmt)

        return [
            DailyRideStats(
                ride_date=row.ride_date,
                total_rides=row.total_rides,
                completed_rides=row.completed_rides,
                cancelled_rides=row.cancelled_rides,
                total_revenue=row.total_revenue,
                average_fare=row.average_fare
            )
            for row in results
        ]

    @staticmethod
    async def get_popular_routes(db: AsyncSession) -> List[PopularRoute]:
        """Routes ranked by completed rides."""
        usage_count = func.count(Ride.id).label("usage_count")
        stmt = select(
            Route.id,
            Route.start_point,
            Route.end_point,
            usage_count,
            func.avg(Ride.fare).label("average_fare"),
            func.max(Ride.created_at).label("last_used")
        ).join(Ride, Ride.route_id == Route.id)\
         .where(Ride.status == RideStatus.COMPLETED)\
         .group_by(Route.id, Route.start_point, Route.end_point)\
         .order_by(usage_count.desc(), Route.id)

        results = await db.execute(stmt)

        return [
            PopularRoute(
                route_id=row.id,
                start_point=row.start_point,
                end_point=row.end_point,
                usage_count=row.usage_count,
                average_fare=row.average_fare,
                last_used=row.last_used
            )
            for row in results
        ]

    @staticmethod
    async def get_payment_analysis(db: AsyncSession) -> List[PaymentMethodStats]:
        total = func.count(Payment.id).label("total_transactions")
        stmt = select(
            Payment.mode,
            total,
            func.sum(case((Payment.status == PaymentStatus.SUCCESSFUL, 1), else_=0)).label("successful"),
            func.sum(case((Payment.status == PaymentStatus.FAILED, 1), else_=0)).label("failed"),
            func.sum(Payment.amount).label("total_amount"),
            func.avg(Payment.amount).label("average_amount")
        ).group_by(Payment.mode).order_by(total.desc())

        results = await db.execute(stmt)

        return [
            PaymentMethodStats(
                mode=row.mode.value,
                total_transactions=row.total_transactions,
                successful_transactions=row.successful,
                failed_transactions=row.failed,
                total_amount=row.total_amount,
                average_amount=row.average_amount
            )
            for row in results
        ]

    @staticmethod
    async def get_driver_performance(db: AsyncSession) -> List[DriverPerformance]:
        """All drivers with rides, rating and accident record."""
        avg_rating = func.avg(Feedback.rating).label("avg_rating")
        stmt = select(
            Driver.id,
            Driver.full_name,
            func.count(distinct(Ride.id)).label("total_rides"),
            avg_rating,
            func.count(distinct(Accident.id)).label("accident_count"),
            func.count(distinct(case((Accident.severity == AccidentSeverity.CRITICAL, Accident.id)))).label("critical_accidents")
        ).outerjoin(Ride, Ride.driver_id == Driver.id)\
         .outerjoin(Feedback, Feedback.ride_id == Ride.id)\
         .outerjoin(Accident, Accident.ride_id == Ride.id)\
         .group_by(Driver.id, Driver.full_name)\
         .order_by(avg_rating.desc().nulls_last(), Driver.id)

        results = await db.execute(stmt)

        return [
            DriverPerformance(
                driver_id=row.id,
                full_name=row.full_name,
                total_rides=row.total_rides,
                avg_rating=row.avg_rating,
                accident_count=row.accident_count,
                critical_accidents=row.critical_accidents
            )
            for row in results
        ]

    @staticmethod
    async def get_high_performing_drivers(
        db: AsyncSession,
        days: int = 30,
        min_rides: int = 20,
        min_rating: float = 4.5
    ) -> List[HighPerformingDriver]:
        """
        Drivers with at least ``min_rides`` completed, rated rides in the last
        ``days`` days and a mean rating of at least ``min_rating``.
        """
        since = datetime.now(timezone.utc) - timedelta(days=days)
        total_rides = func.count(Ride.id).label("total_rides")
        avg_rating = func.avg(Feedback.rating).label("avg_rating")

        stmt = select(
            Driver.id,
            Driver.full_name,
            total_rides,
            avg_rating
        ).join(Ride, Ride.driver_id == Driver.id)\
         .join(Feedback, Feedback.ride_id == Ride.id)\
         .where(
             Ride.status == RideStatus.COMPLETED,
             Ride.created_at >= since
         )\
         .group_by(Driver.id, Driver.full_name)\
         .having(and_(total_rides >= min_rides, avg_rating >= min_rating))\
         .order_by(avg_rating.desc().nulls_last(), Driver.id)

        results = await db.execute(stmt)

        return [
            HighPerformingDriver(
                driver_id=row.id,
                full_name=row.full_name,
                total_rides=row.total_rides,
                avg_rating=row.avg_rating
            )
            for row in results
        ]

    @staticmethod
    async def get_incident_analysis(db: AsyncSession) -> List[RouteIncidents]:
        """Routes that have seen at least one accident."""
        total_accidents = func.count(Accident.id).label("total_accidents")
        stmt = select(
            Route.id,
            Route.start_point,
            Route.end_point,
            total_accidents,
            func.count(distinct(case((Accident.severity == AccidentSeverity.CRITICAL, Accident.id)))).label("critical_accidents"),
            func.count(distinct(case((Accident.claim_status == ClaimStatus.OPEN, Accident.id)))).label("open_claims")
        ).outerjoin(Ride, Ride.route_id == Route.id)\
         .outerjoin(Accident, Accident.ride_id == Ride.id)\
         .group_by(Route.id, Route.start_point, Route.end_point)\
         .having(total_accidents > 0)\
         .order_by(total_accidents.desc(), Route.id)

        results = await db.execute(stmt)

        return [
            RouteIncidents(
                route_id=row.id,
                start_point=row.start_point,
                end_point=row.end_point,
                total_accidents=row.total_accidents,
                critical_accidents=row.critical_accidents,
                open_claims=row.open_claims
            )
            for row in results
        ]

    @staticmethod
    async def get_traffic_impact(db: AsyncSession) -> List[TrafficImpact]:
        """
        Estimated vs. actual duration of completed rides that overlapped a
        traffic report on their route, grouped by route and severity.

        Actual duration is updated_at - created_at. The averaging happens
        here rather than in SQL because interval arithmetic differs per
        database.
        """
        stmt = select(
            Route.id,
            Route.start_point,
            Route.end_point,
            Route.duration_min,
            TrafficReport.severity,
            Ride.created_at,
            Ride.updated_at
        ).join(Ride, Ride.route_id == Route.id)\
         .join(TrafficReport, TrafficReport.route_id == Route.id)\
         .where(
             Ride.status == RideStatus.COMPLETED,
             TrafficReport.reported_at.between(Ride.created_at, Ride.updated_at)
         )\
         .order_by(Route.id)

        results = await db.execute(stmt)

        groups = defaultdict(list)
        routes = {}
        for row in results:
            minutes = (_as_utc(row.updated_at) - _as_utc(row.created_at)).total_seconds() / 60
            groups[(row.id, row.severity.value)].append(minutes)
            routes[row.id] = row

        data = []
        for (route_id, severity), durations in sorted(groups.items()):
            route = routes[route_id]
            data.append(TrafficImpact(
                route_id=route_id,
                start_point=route.start_point,
                end_point=route.end_point,
                estimated_duration=route.duration_min,
                actual_avg_duration=round(sum(durations) / len(durations), 2),
                severity=severity,
                ride_count=len(durations)
            ))
        return data
