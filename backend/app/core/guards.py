"""
Security guards for role-based and ownership-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List, Optional, Tuple
from fastapi import Depends
from backend.app.models.enums import AccountType
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError


def require_role(allowed_types: List[AccountType]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/admin/rides/stats")
        async def ride_stats(current_user: dict = Depends(require_role([AccountType.ADMIN]))):
            ...

    Args:
        allowed_types: Account types that may access the endpoint

    Returns:
        FastAPI dependency function that validates the caller's type

    Raises:
        InsufficientPermissionsError (403) if the caller's type is not allowed
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        try:
            account_type = AccountType(current_user.get("type"))
        except ValueError:
            raise InsufficientPermissionsError("Invalid account type in token")

        if account_type not in allowed_types:
            raise InsufficientPermissionsError(
                f"Access denied. Required account type: {', '.join([t.value for t in allowed_types])}"
            )

        return current_user

    return role_checker


require_admin = require_role([AccountType.ADMIN])
require_passenger = require_role([AccountType.PASSENGER])
require_driver = require_role([AccountType.DRIVER])


def is_admin(current_user: dict) -> bool:
    return current_user.get("type") == AccountType.ADMIN.value


class OwnershipGuard:
    """
    Ride-party ownership checks.

    A ride is visible to its passenger, its assigned driver and admins.
    Everyone else is told the ride does not exist.

    Usage:
        ownership_guard = OwnershipGuard()

        ride = await db.get(Ride, ride_id)
        ownership_guard.enforce(ride.passenger_id, ride.driver_id, current_user, "Ride", ride_id)
    """

    def is_party(self, passenger_id: int, driver_id: Optional[int], current_user: dict) -> bool:
        account_type = current_user.get("type")
        account_id = current_user.get("user_id")

        if account_type == AccountType.ADMIN.value:
            return True
        if account_type == AccountType.PASSENGER.value:
            return account_id == passenger_id
        if account_type == AccountType.DRIVER.value:
            return driver_id is not None and account_id == driver_id
        return False

    def enforce(
        self,
        passenger_id: int,
        driver_id: Optional[int],
        current_user: dict,
        resource_name: str = "Ride",
        resource_id: Optional[int] = None
    ):
        """
        Raise ResourceNotFoundError (404) unless the caller is a party or an admin.
        """
        if not self.is_party(passenger_id, driver_id, current_user):
            raise ResourceNotFoundError(resource_name, resource_id)

    def filter_by_ownership(self, current_user: dict) -> Tuple[Optional[str], Optional[int]]:
        """
        Get the column and id to filter ride queries by.

        For admins: (None, None), no filtering
        For passengers: ("passenger_id", their id)
        For drivers: ("driver_id", their id)

        Usage:
            column, owner_id = ownership_guard.filter_by_ownership(current_user)
            if column:
                query = query.where(getattr(Ride, column) == owner_id)
        """
        account_type = current_user.get("type")
        account_id = current_user.get("user_id")

        if account_type == AccountType.PASSENGER.value:
            return "passenger_id", account_id
        if account_type == AccountType.DRIVER.value:
            return "driver_id", account_id
        return None, None
