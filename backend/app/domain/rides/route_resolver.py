"""
Route resolution.

Passenger requests reuse the route for an exact (start, end) pair; the
trusted creation path always records a fresh route with the distance and
duration the caller measured.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.config import settings
from backend.app.models.route import Route

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteEstimate:
    distance_km: float
    duration_min: int


class RouteEstimator(Protocol):
    async def estimate(self, start_point: str, end_point: str) -> RouteEstimate:
        ...


class PlaceholderRouteEstimator:
    """Constant estimate until a mapping service is integrated."""

    async def estimate(self, start_point: str, end_point: str) -> RouteEstimate:
        return RouteEstimate(
            distance_km=settings.default_route_distance_km,
            duration_min=settings.default_route_duration_min,
        )


default_estimator = PlaceholderRouteEstimator()


async def complete_estimate(
    start_point: str,
    end_point: str,
    distance_km: Optional[float],
    duration_min: Optional[int],
    estimator: RouteEstimator = default_estimator
) -> RouteEstimate:
    """
    Caller-measured distance and duration, with whichever is missing taken
    from the estimator.
    """
    if distance_km is not None and duration_min is not None:
        return RouteEstimate(distance_km=distance_km, duration_min=duration_min)

    fallback = await estimator.estimate(start_point, end_point)
    return RouteEstimate(
        distance_km=distance_km if distance_km is not None else fallback.distance_km,
        duration_min=duration_min if duration_min is not None else fallback.duration_min,
    )


async def find_route(db: AsyncSession, start_point: str, end_point: str) -> Optional[Route]:
    result = await db.execute(
        select(Route).where(
            Route.start_point == start_point,
            Route.end_point == end_point
        ).order_by(Route.id).limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_route(
    db: AsyncSession,
    start_point: str,
    end_point: str,
    *,
    reuse: bool,
    estimate: Optional[RouteEstimate] = None,
    estimator: RouteEstimator = default_estimator
) -> Route:
    """
    Get the route row for a ride.

    Args:
        db: Database session (flushed, not committed)
        start_point: Free-text pickup address
        end_point: Free-text destination address
        reuse: Look up an existing (start, end) route before creating one
        estimate: Caller-supplied distance/duration; otherwise the estimator is asked
        estimator: Distance/duration source for new routes

    Returns:
        Existing or newly flushed Route
    """
    if reuse:
        existing = await find_route(db, start_point, end_point)
        if existing:
            return existing

    if estimate is None:
        estimate = await estimator.estimate(start_point, end_point)

    route = Route(
        start_point=start_point,
        end_point=end_point,
        distance_km=estimate.distance_km,
        duration_min=estimate.duration_min,
    )
    db.add(route)
    await db.flush()

    logger.info("Created route %s (%s -> %s, %.2f km)", route.id, start_point, end_point, route.distance_km)
    return route
