"""
Account and vehicle enumerations.

Defines the identity types and the driver/vehicle vocabularies
for the ride hailing system.
"""

import enum


class CaseInsensitiveEnum(str, enum.Enum):
    """String enum that also accepts values in any letter case ("car" -> Car)."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class AccountType(str, enum.Enum):
    """
    Identity type carried in every access token.

    Types:
        PASSENGER: Requests, cancels, rates and pays for rides
        DRIVER: Owns vehicles and progresses assigned rides
        ADMIN: Seeded staff account with system-wide access
    """
    PASSENGER = "passenger"
    DRIVER = "driver"
    ADMIN = "admin"


class AdminRole(str, enum.Enum):
    SUPER_ADMIN = "SuperAdmin"
    SUPPORT = "Support"
    MANAGER = "Manager"


class DriverStatus(CaseInsensitiveEnum):
    """Driver availability. Only ACTIVE drivers are matched to requests."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    SUSPENDED = "Suspended"


class VehicleType(CaseInsensitiveEnum):
    CAR = "Car"
    BIKE = "Bike"
    AUTO = "Auto"
    SUV = "SUV"
    LUXURY = "Luxury"
