"""
Admin API Endpoints.

Read-only reporting over rides, drivers, passengers, payments and
incidents, plus the audit trail. All endpoints are admin-only.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.core.guards import require_admin
from backend.app.services.analytics import AnalyticsService
from backend.app.services.audit import get_audit_trail
from backend.app.schemas.admin import AuditTrailResponse, AuditLogResponse
from backend.app.schemas.analytics import (
    ActiveDriverSummary, PassengerActivity, DailyRideStats, PopularRoute,
    PaymentMethodStats, DriverPerformance, HighPerformingDriver,
    RouteIncidents, TrafficImpact
)

router = APIRouter(prefix="/admin", tags=["Admin"])


# --- Drivers & passengers ---

@router.get("/drivers/summary", response_model=List[ActiveDriverSummary])
async def active_drivers_summary(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Active drivers with ride count, mean rating and vehicle count."""
    return await AnalyticsService.get_active_drivers_summary(db)


@router.get("/drivers/performance", response_model=List[DriverPerformance])
async def driver_performance(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_driver_performance(db)


@router.get("/drivers/high-performing", response_model=List[HighPerformingDriver])
async def high_performing_drivers(
    days: int = Query(30, ge=1, le=365, description="Look-back window in days"),
    min_rides: int = Query(20, ge=1, description="Minimum completed, rated rides"),
    min_rating: float = Query(4.5, ge=0, le=5, description="Minimum mean rating"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_high_performing_drivers(db, days, min_rides, min_rating)


@router.get("/passengers/activity", response_model=List[PassengerActivity])
async def passenger_activity(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_passenger_activity(db)


# --- Rides, routes & payments ---

@router.get("/rides/stats", response_model=List[DailyRideStats])
async def daily_ride_stats(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_daily_ride_stats(db)


@router.get("/routes/popular", response_model=List[PopularRoute])
async def popular_routes(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_popular_routes(db)


@router.get("/routes/traffic-impact", response_model=List[TrafficImpact])
async def traffic_impact(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_traffic_impact(db)


@router.get("/payments/analysis", response_model=List[PaymentMethodStats])
async def payment_analysis(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_payment_analysis(db)


@router.get("/incidents/analysis", response_model=List[RouteIncidents])
async def incident_analysis(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AnalyticsService.get_incident_analysis(db)


# --- Audit trail ---

@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    target_id: Optional[int] = Query(None, description="Filter by target ride/payment/account ID"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Maximum records to return"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail with optional filtering (admin-only).

    Returns recent audit logs for support and dispute handling.
    """
    logs = await get_audit_trail(
        db=db,
        target_id=target_id,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
