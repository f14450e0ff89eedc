"""
Tests for trusted ride creation (POST /v1/rides).

The caller supplies driver, distance, duration and fare; the server
records a fresh route and falls back to any driver when needed.
"""

import pytest
from sqlalchemy import select, func

from backend.app.models.ride import Ride
from backend.app.models.route import Route
from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.models.enums import AccountType, VehicleType
from backend.app.models.ride_enums import RideStatus


def _trusted_payload(passenger_id, driver_id=None, **overrides):
    payload = {
        "passengerId": passenger_id,
        "driverId": driver_id,
        "pickup": {"address": "Connaught Place", "lat": 28.6315, "lng": 77.2167},
        "destination": {"address": "Hauz Khas", "lat": 28.5494, "lng": 77.2001},
        "distance": 12.5,
        "duration": 35,
        "fare": 220,
        "vehicleType": "Car",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_trusted_ride_is_accepted_with_caller_values(client, db_session, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver(vehicle_type=VehicleType.SUV)

    response = await client.post(
        "/v1/rides", json=_trusted_payload(passenger.id, driver.id), headers=admin_headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "accepted"
    assert body["driverId"] == driver.id
    assert body["fare"] == 220
    assert body["distance"] == 12.5
    assert body["duration"] == 35
    assert body["pickup"] == {"address": "Connaught Place", "lat": 28.6315, "lng": 77.2167}
    assert body["destination"]["address"] == "Hauz Khas"

    result = await db_session.execute(select(Ride.status).where(Ride.id == body["id"]))
    assert result.scalar_one() == RideStatus.ACCEPTED


@pytest.mark.asyncio
async def test_trusted_path_always_creates_route(client, db_session, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver()

    for _ in range(2):
        response = await client.post(
            "/v1/rides", json=_trusted_payload(passenger.id, driver.id), headers=admin_headers
        )
        assert response.status_code == 201

    result = await db_session.execute(select(func.count(Route.id)))
    assert result.scalar_one() == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("driver_id", ["driver-abc", 9999, None])
async def test_unknown_driver_falls_back_to_existing(client, make_passenger, make_driver, admin_headers, driver_id):
    passenger = await make_passenger()
    first = await make_driver(vehicle_type=VehicleType.CAR)
    await make_driver(vehicle_type=VehicleType.CAR)

    response = await client.post(
        "/v1/rides", json=_trusted_payload(passenger.id, driver_id), headers=admin_headers
    )

    assert response.status_code == 201
    assert response.json()["driverId"] == first.id


@pytest.mark.asyncio
async def test_numeric_string_driver_id(client, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    await make_driver()
    second = await make_driver()

    response = await client.post(
        "/v1/rides", json=_trusted_payload(passenger.id, str(second.id)), headers=admin_headers
    )

    assert response.json()["driverId"] == second.id


@pytest.mark.asyncio
async def test_empty_driver_table_gets_placeholder(client, db_session, make_passenger, admin_headers):
    passenger = await make_passenger()

    response = await client.post(
        "/v1/rides", json=_trusted_payload(passenger.id, "anyone", vehicleType="Bike"), headers=admin_headers
    )

    assert response.status_code == 201
    driver_id = response.json()["driverId"]

    result = await db_session.execute(select(Driver.email).where(Driver.id == driver_id))
    assert result.scalar_one() == "driver@system.com"

    result = await db_session.execute(
        select(Vehicle.model, Vehicle.capacity, Vehicle.vehicle_type).where(Vehicle.driver_id == driver_id)
    )
    assert result.one() == ("Default Vehicle", 4, VehicleType.BIKE)


@pytest.mark.asyncio
async def test_driver_without_vehicle_gets_default_vehicle(client, db_session, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver()

    response = await client.post(
        "/v1/rides", json=_trusted_payload(passenger.id, driver.id), headers=admin_headers
    )

    result = await db_session.execute(select(Vehicle.model).where(Vehicle.id == response.json()["vehicleId"]))
    assert result.scalar_one() == "Default Vehicle"


@pytest.mark.asyncio
async def test_tariff_applies_when_fare_omitted(client, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver()

    response = await client.post(
        "/v1/rides",
        json=_trusted_payload(passenger.id, driver.id, distance=10, fare=None),
        headers=admin_headers
    )

    # Car: 40 + 15 * 10
    assert response.json()["fare"] == 190


@pytest.mark.asyncio
async def test_missing_distance_uses_estimate(client, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver()

    response = await client.post(
        "/v1/rides",
        json=_trusted_payload(passenger.id, driver.id, distance=None, duration=None),
        headers=admin_headers
    )

    assert response.json()["distance"] == 10
    assert response.json()["duration"] == 20


@pytest.mark.asyncio
async def test_caller_distance_kept_without_duration(client, db_session, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver()

    response = await client.post(
        "/v1/rides",
        json=_trusted_payload(passenger.id, driver.id, distance=30, duration=None, fare=None),
        headers=admin_headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["distance"] == 30
    assert body["duration"] == 20
    # Car: 40 + 15 * 30
    assert body["fare"] == 490

    result = await db_session.execute(
        select(Route.distance_km, Route.duration_min)
        .join(Ride, Ride.route_id == Route.id)
        .where(Ride.id == body["id"])
    )
    assert result.one() == (30, 20)


@pytest.mark.asyncio
async def test_caller_duration_kept_without_distance(client, make_passenger, make_driver, admin_headers):
    passenger = await make_passenger()
    driver = await make_driver()

    response = await client.post(
        "/v1/rides",
        json=_trusted_payload(passenger.id, driver.id, distance=None, duration=45),
        headers=admin_headers
    )

    assert response.json()["distance"] == 10
    assert response.json()["duration"] == 45


@pytest.mark.asyncio
async def test_passenger_creates_own_ride_only(client, make_passenger, make_driver, headers_for):
    passenger = await make_passenger()
    other = await make_passenger()
    driver = await make_driver()
    headers = headers_for(passenger, AccountType.PASSENGER)

    response = await client.post("/v1/rides", json=_trusted_payload(passenger.id, driver.id), headers=headers)
    assert response.status_code == 201

    response = await client.post("/v1/rides", json=_trusted_payload(other.id, driver.id), headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_passenger(client, make_driver, admin_headers):
    driver = await make_driver()

    response = await client.post("/v1/rides", json=_trusted_payload(4242, driver.id), headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["details"]["resource"] == "Passenger"


@pytest.mark.asyncio
async def test_drivers_cannot_use_trusted_path(client, make_passenger, make_driver, headers_for):
    passenger = await make_passenger()
    driver = await make_driver()

    response = await client.post(
        "/v1/rides",
        json=_trusted_payload(passenger.id, driver.id),
        headers=headers_for(driver, AccountType.DRIVER)
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_negative_fare_rejected(client, make_passenger, admin_headers):
    passenger = await make_passenger()

    response = await client.post(
        "/v1/rides", json=_trusted_payload(passenger.id, fare=-5), headers=admin_headers
    )

    assert response.status_code == 422
