"""
Ride Service (Domain Logic).

Every write to a ride goes through this module: creation on both entry
paths, status transitions, passenger cancellation and rating. Methods only
flush; the calling endpoint owns the transaction and commits once.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError

from backend.app.models.ride import Ride
from backend.app.models.route import Route
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.models.passenger import Passenger
from backend.app.models.feedback import Feedback
from backend.app.models.enums import AccountType, VehicleType
from backend.app.models.ride_enums import RideStatus
from backend.app.core.guards import OwnershipGuard
from backend.app.core.exceptions import (
    ResourceNotFoundError,
    InvalidTransitionError,
    AlreadyTerminalError,
    RideNotCompletedError,
    AlreadyRatedError,
)
from backend.app.domain.rides import state_machine
from backend.app.domain.rides.fare_policy import passenger_fare_policy, tariff_for
from backend.app.domain.rides.route_resolver import complete_estimate, resolve_route
from backend.app.domain.rides.driver_matching import (
    find_available_driver,
    resolve_trusted_driver,
    resolve_driver_vehicle,
)

logger = logging.getLogger(__name__)
ownership_guard = OwnershipGuard()


@dataclass(frozen=True)
class CreationPolicy:
    """
    How much of a ride request is taken on trust.

    reuse_route: look up the (start, end) route before creating one
    trusted: caller supplies driver, distance, duration and fare
    initial_status: status the ride is inserted with
    """
    name: str
    reuse_route: bool
    trusted: bool
    initial_status: RideStatus


PASSENGER_REQUEST = CreationPolicy(
    name="passenger_request",
    reuse_route=True,
    trusted=False,
    initial_status=RideStatus.REQUESTED,
)

TRUSTED = CreationPolicy(
    name="trusted",
    reuse_route=False,
    trusted=True,
    initial_status=RideStatus.ACCEPTED,
)


@dataclass
class RideRequest:
    passenger_id: int
    start_point: str
    end_point: str
    vehicle_type: VehicleType = VehicleType.CAR
    # Trusted path only
    driver_id: Any = None
    distance_km: Optional[float] = None
    duration_min: Optional[int] = None
    fare: Optional[float] = None


@dataclass
class RatingResult:
    feedback: Feedback
    driver_avg_rating: float
    passenger_avg_rating_given: float


def _detail_query():
    """Ride joined with its driver, passenger, route and (optional) vehicle."""
    return (
        select(
            Ride.id,
            Ride.passenger_id,
            Ride.driver_id,
            Ride.vehicle_id,
            Ride.fare,
            Ride.status,
            Ride.created_at,
            Ride.updated_at,
            Passenger.full_name.label("passenger_name"),
            Driver.full_name.label("driver_name"),
            Vehicle.model.label("vehicle_model"),
            Route.start_point,
            Route.end_point,
            Route.distance_km.label("distance"),
            Route.duration_min.label("duration"),
        )
        .join(Driver, Ride.driver_id == Driver.id)
        .join(Passenger, Ride.passenger_id == Passenger.id)
        .join(Route, Ride.route_id == Route.id)
        .outerjoin(Vehicle, Ride.vehicle_id == Vehicle.id)
    )


async def _feedback_exists(db: AsyncSession, ride_id: int) -> bool:
    result = await db.execute(select(Feedback.id).where(Feedback.ride_id == ride_id).limit(1))
    return result.first() is not None


class RideService:

    @staticmethod
    async def create_ride(db: AsyncSession, request: RideRequest, policy: CreationPolicy) -> Ride:
        """
        Create a ride on either entry path.

        Flow:
        1. Passenger must exist
        2. Resolve route (lookup-or-create, or always create)
        3. Resolve driver and vehicle (matching, or trusted fallback chain)
        4. Compute fare (flat passenger policy, or caller fare / tariff)
        5. Insert ride in the policy's initial status

        Args:
            db: Database session (flushed, not committed)
            request: Ride request data
            policy: PASSENGER_REQUEST or TRUSTED

        Returns:
            Flushed Ride

        Raises:
            ResourceNotFoundError: unknown passenger
            NoDriversAvailableError: no Active driver with a matching vehicle
        """
        passenger = await db.get(Passenger, request.passenger_id)
        if not passenger:
            raise ResourceNotFoundError("Passenger", request.passenger_id)

        estimate = None
        if policy.trusted:
            estimate = await complete_estimate(
                request.start_point, request.end_point, request.distance_km, request.duration_min
            )

        route = await resolve_route(
            db,
            request.start_point,
            request.end_point,
            reuse=policy.reuse_route,
            estimate=estimate,
        )

        if policy.trusted:
            driver = await resolve_trusted_driver(db, request.driver_id)
            vehicle = await resolve_driver_vehicle(db, driver, request.vehicle_type)
            if request.fare is not None:
                fare = request.fare
            else:
                fare = tariff_for(request.vehicle_type).quote(route.distance_km)
        else:
            driver, vehicle = await find_available_driver(db, request.vehicle_type)
            fare = passenger_fare_policy().quote(route.distance_km)

        ride = Ride(
            passenger_id=passenger.id,
            driver_id=driver.id,
            route_id=route.id,
            vehicle_id=vehicle.id,
            fare=fare,
            status=policy.initial_status,
        )
        db.add(ride)
        await db.flush()

        logger.info(
            "Ride %s created via %s: passenger=%s driver=%s route=%s fare=%.2f status=%s",
            ride.id, policy.name, passenger.id, driver.id, route.id, fare, policy.initial_status.value
        )
        return ride

    @staticmethod
    async def _apply_transition(db: AsyncSession, ride: Ride, target: RideStatus) -> Ride:
        """
        Conditional write: only succeeds if the row still has the status we read.
        """
        expected = ride.status
        result = await db.execute(
            update(Ride)
            .where(Ride.id == ride.id, Ride.status == expected)
            .values(status=target)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            raise InvalidTransitionError(
                expected.value,
                target.value,
                message="Ride status was changed by another request, please retry"
            )

        await db.refresh(ride)
        logger.info("Ride %s status %s -> %s", ride.id, expected.value, target.value)
        return ride

    @staticmethod
    async def update_status(db: AsyncSession, ride_id: int, target: RideStatus, current_user: dict) -> Ride:
        """
        Move a ride along one edge of the state machine.

        Checks, in order:
        1. Caller is a party to the ride or an admin (404 otherwise)
        2. current -> target is a legal edge (409 otherwise)
        3. Caller's role may request target (403 otherwise)
        """
        ride = await db.get(Ride, ride_id)
        if not ride:
            raise ResourceNotFoundError("Ride", ride_id)

        ownership_guard.enforce(ride.passenger_id, ride.driver_id, current_user, "Ride", ride_id)

        state_machine.ensure_transition(ride.status, target)

        account_type = AccountType(current_user.get("type"))
        account_id = current_user.get("user_id")
        state_machine.authorize_transition(
            target,
            account_type,
            is_assigned_driver=account_type == AccountType.DRIVER and ride.driver_id == account_id,
            is_owning_passenger=account_type == AccountType.PASSENGER and ride.passenger_id == account_id,
        )

        return await RideService._apply_transition(db, ride, target)

    @staticmethod
    async def _get_owned_ride(db: AsyncSession, ride_id: int, passenger_id: int) -> Ride:
        ride = await db.get(Ride, ride_id)
        if not ride or ride.passenger_id != passenger_id:
            raise ResourceNotFoundError("Ride", ride_id)
        return ride

    @staticmethod
    async def cancel_ride(db: AsyncSession, ride_id: int, passenger_id: int) -> Ride:
        """
        Passenger cancels their own ride.

        No refund or driver notification is triggered.

        Raises:
            ResourceNotFoundError: unknown ride, or not the caller's
            AlreadyTerminalError: ride is Completed or Cancelled
        """
        ride = await RideService._get_owned_ride(db, ride_id, passenger_id)

        if state_machine.is_terminal(ride.status):
            raise AlreadyTerminalError(ride.status.value)

        return await RideService._apply_transition(db, ride, RideStatus.CANCELLED)

    @staticmethod
    async def rate_ride(
        db: AsyncSession,
        ride_id: int,
        passenger_id: int,
        rating: float,
        comment: Optional[str] = None
    ) -> RatingResult:
        """
        Record the passenger's rating of a completed ride.

        Recomputes the driver's avg_rating (mean over feedback received) and
        the passenger's avg_rating_given (mean over feedback given) in the
        same transaction as the insert.

        Raises:
            ResourceNotFoundError: unknown ride, or not the caller's
            RideNotCompletedError: ride is not Completed
            AlreadyRatedError: feedback already exists for the ride
        """
        ride = await RideService._get_owned_ride(db, ride_id, passenger_id)

        if ride.status != RideStatus.COMPLETED:
            raise RideNotCompletedError(ride.status.value)

        if await _feedback_exists(db, ride_id):
            raise AlreadyRatedError(ride_id)

        feedback = Feedback(
            ride_id=ride.id,
            passenger_id=passenger_id,
            driver_id=ride.driver_id,
            rating=rating,
            comment=comment or "",
        )
        db.add(feedback)
        try:
            await db.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent rating of the same ride
            raise AlreadyRatedError(ride_id) from exc

        driver_avg = (await db.execute(
            select(func.avg(Feedback.rating)).where(Feedback.driver_id == ride.driver_id)
        )).scalar_one()
        await db.execute(
            update(Driver)
            .where(Driver.id == ride.driver_id)
            .values(avg_rating=driver_avg)
            .execution_options(synchronize_session=False)
        )

        passenger_avg = (await db.execute(
            select(func.avg(Feedback.rating)).where(Feedback.passenger_id == passenger_id)
        )).scalar_one()
        await db.execute(
            update(Passenger)
            .where(Passenger.id == passenger_id)
            .values(avg_rating_given=passenger_avg)
            .execution_options(synchronize_session=False)
        )

        logger.info(
            "Ride %s rated %.1f; driver %s avg=%.2f, passenger %s avg given=%.2f",
            ride_id, rating, ride.driver_id, driver_avg, passenger_id, passenger_avg
        )
        return RatingResult(
            feedback=feedback,
            driver_avg_rating=float(driver_avg),
            passenger_avg_rating_given=float(passenger_avg),
        )

    # Queries

    @staticmethod
    async def get_ride_detail(db: AsyncSession, ride_id: int):
        """Joined ride row, or None."""
        result = await db.execute(_detail_query().where(Ride.id == ride_id))
        row = result.mappings().one_or_none()
        return dict(row) if row is not None else None

    @staticmethod
    async def get_visible_ride(db: AsyncSession, ride_id: int, current_user: dict):
        """Joined ride row for a party to the ride or an admin; 404 for everyone else."""
        detail = await RideService.get_ride_detail(db, ride_id)
        if detail is None:
            raise ResourceNotFoundError("Ride", ride_id)

        ownership_guard.enforce(detail["passenger_id"], detail["driver_id"], current_user, "Ride", ride_id)
        return detail

    @staticmethod
    async def get_passenger_history(db: AsyncSession, passenger_id: int) -> List:
        result = await db.execute(
            _detail_query()
            .where(Ride.passenger_id == passenger_id)
            .order_by(Ride.created_at.desc(), Ride.id.desc())
        )
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def get_driver_rides(db: AsyncSession, driver_id: int, status: Optional[RideStatus] = None) -> List:
        query = _detail_query().where(Ride.driver_id == driver_id)
        if status:
            query = query.where(Ride.status == status)

        result = await db.execute(query.order_by(Ride.created_at.desc(), Ride.id.desc()))
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    async def get_active_rides(db: AsyncSession, current_user: dict) -> List:
        """Ongoing rides; admins see all, everyone else only rides they are party to."""
        query = _detail_query().where(Ride.status == RideStatus.ONGOING)

        column, owner_id = ownership_guard.filter_by_ownership(current_user)
        if column:
            query = query.where(getattr(Ride, column) == owner_id)

        result = await db.execute(query.order_by(Ride.id))
        return [dict(row) for row in result.mappings().all()]
