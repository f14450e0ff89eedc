"""
Ride status state machine.

Single source of truth for which status changes are legal and who may make
them. Every operation that writes Ride.status goes through here.

    Requested -> Accepted -> Ongoing -> Completed
        |            |          |
        +------------+----------+---> Cancelled
"""

from typing import Dict, FrozenSet

from backend.app.models.enums import AccountType
from backend.app.models.ride_enums import RideStatus
from backend.app.core.exceptions import InvalidTransitionError, InsufficientPermissionsError


ALLOWED_TRANSITIONS: Dict[RideStatus, FrozenSet[RideStatus]] = {
    RideStatus.REQUESTED: frozenset({RideStatus.ACCEPTED, RideStatus.CANCELLED}),
    RideStatus.ACCEPTED: frozenset({RideStatus.ONGOING, RideStatus.CANCELLED}),
    RideStatus.ONGOING: frozenset({RideStatus.COMPLETED, RideStatus.CANCELLED}),
    RideStatus.COMPLETED: frozenset(),
    RideStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[RideStatus] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# Transitions that move a ride forward on the driver's side
DRIVER_TRANSITIONS: FrozenSet[RideStatus] = frozenset(
    {RideStatus.ACCEPTED, RideStatus.ONGOING, RideStatus.COMPLETED}
)


def is_terminal(status: RideStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: RideStatus, target: RideStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: RideStatus, target: RideStatus) -> None:
    """
    Raise InvalidTransitionError unless current -> target is an edge of the graph.
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)


def authorize_transition(
    target: RideStatus,
    account_type: AccountType,
    *,
    is_assigned_driver: bool,
    is_owning_passenger: bool
) -> None:
    """
    Check that the caller may request this target status.

    Admins may request any status. Driver-side transitions need the assigned
    driver; cancellation needs the owning passenger. Callers that are not a
    party to the ride must be rejected (as not found) before this is called.

    Raises:
        InsufficientPermissionsError: caller is a party but has the wrong role
    """
    if account_type == AccountType.ADMIN:
        return

    if target in DRIVER_TRANSITIONS:
        if not is_assigned_driver:
            raise InsufficientPermissionsError(
                f"Only the assigned driver can mark a ride as {target.value}"
            )
        return

    if target == RideStatus.CANCELLED:
        if not is_owning_passenger:
            raise InsufficientPermissionsError("Only the passenger can cancel this ride")
        return

    raise InsufficientPermissionsError(f"Status {target.value} cannot be set directly")
