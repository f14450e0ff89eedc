"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import auth, passengers, drivers, rides, payments, admin

router = APIRouter()

# Include authentication endpoints
router.include_router(auth.router)

# Accounts, vehicles & passenger ride requests
router.include_router(passengers.router)
router.include_router(drivers.router)

# Ride lifecycle
router.include_router(rides.router)

# Payments
router.include_router(payments.router)

# Include admin endpoints (reporting + audit trail)
router.include_router(admin.router)
