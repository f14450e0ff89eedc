"""
Ride-related enumerations.
"""

from backend.app.models.enums import CaseInsensitiveEnum


class RideStatus(CaseInsensitiveEnum):
    """Ride status enumeration."""
    REQUESTED = "Requested"  # Created by a passenger, waiting for the driver
    ACCEPTED = "Accepted"  # Driver accepted (or created on the trusted path)
    ONGOING = "Ongoing"  # Passenger picked up
    COMPLETED = "Completed"  # Terminal
    CANCELLED = "Cancelled"  # Terminal
