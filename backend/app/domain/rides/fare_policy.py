"""
Fare Policy.

Fares are base + distance * per-km rate. The passenger request path uses the
configured flat policy; the trusted path takes the caller's fare and only
falls back to the per-vehicle-type tariff (the rates the web client quotes
with) when no fare is supplied.
"""

from dataclasses import dataclass
from typing import Dict

from backend.app.core.config import settings
from backend.app.models.enums import VehicleType


@dataclass(frozen=True)
class FarePolicy:
    base_fare: float
    per_km_rate: float
    round_to_whole: bool = False

    def quote(self, distance_km: float) -> float:
        """Fare for a trip of ``distance_km`` kilometres."""
        fare = self.base_fare + distance_km * self.per_km_rate
        if self.round_to_whole:
            return float(round(fare))
        return fare


VEHICLE_TYPE_TARIFFS: Dict[VehicleType, FarePolicy] = {
    VehicleType.BIKE: FarePolicy(base_fare=15, per_km_rate=8, round_to_whole=True),
    VehicleType.AUTO: FarePolicy(base_fare=25, per_km_rate=12, round_to_whole=True),
    VehicleType.CAR: FarePolicy(base_fare=40, per_km_rate=15, round_to_whole=True),
    VehicleType.SUV: FarePolicy(base_fare=60, per_km_rate=20, round_to_whole=True),
    VehicleType.LUXURY: FarePolicy(base_fare=100, per_km_rate=30, round_to_whole=True),
}


def passenger_fare_policy() -> FarePolicy:
    """Flat policy for passenger-initiated requests (50 + 10/km by default)."""
    return FarePolicy(base_fare=settings.base_fare, per_km_rate=settings.per_km_rate)


def tariff_for(vehicle_type: VehicleType) -> FarePolicy:
    return VEHICLE_TYPE_TARIFFS.get(vehicle_type, VEHICLE_TYPE_TARIFFS[VehicleType.CAR])
