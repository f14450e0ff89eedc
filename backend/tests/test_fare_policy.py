"""
Unit tests for fare computation and route estimation.
"""

import pytest

from backend.app.domain.rides.fare_policy import FarePolicy, passenger_fare_policy, tariff_for
from backend.app.domain.rides.route_resolver import PlaceholderRouteEstimator, complete_estimate
from backend.app.models.enums import VehicleType


def test_passenger_fare_uses_default_constants():
    policy = passenger_fare_policy()
    assert policy.base_fare == 50
    assert policy.per_km_rate == 10
    assert policy.quote(10) == 150


@pytest.mark.parametrize("distance,delta", [(1.0, 1.0), (10.0, 2.5), (3.3, 7.0)])
def test_fare_changes_linearly_with_distance(distance, delta):
    policy = passenger_fare_policy()
    assert policy.quote(distance + delta) - policy.quote(distance) == pytest.approx(10 * delta)


def test_vehicle_tariffs_round_to_whole_units():
    assert tariff_for(VehicleType.BIKE).quote(5.3) == 57.0  # 15 + 8 * 5.3 = 57.4
    assert tariff_for(VehicleType.LUXURY).quote(10) == 400.0


def test_unrounded_policy_keeps_fractions():
    assert FarePolicy(base_fare=10, per_km_rate=1.5).quote(3) == 14.5


@pytest.mark.asyncio
async def test_placeholder_estimator_returns_constants():
    estimate = await PlaceholderRouteEstimator().estimate("Delhi CP", "Nehru Place")
    assert estimate.distance_km == 10
    assert estimate.duration_min == 20


@pytest.mark.asyncio
async def test_partial_estimate_fills_only_missing_fields():
    estimate = await complete_estimate("Delhi CP", "Nehru Place", 30, None)
    assert (estimate.distance_km, estimate.duration_min) == (30, 20)

    estimate = await complete_estimate("Delhi CP", "Nehru Place", None, 45)
    assert (estimate.distance_km, estimate.duration_min) == (10, 45)

    estimate = await complete_estimate("Delhi CP", "Nehru Place", 12.5, 35)
    assert (estimate.distance_km, estimate.duration_min) == (12.5, 35)
