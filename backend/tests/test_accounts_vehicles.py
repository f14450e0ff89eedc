"""
Tests for passenger and driver profiles, driver availability and vehicles.
"""

import pytest
from sqlalchemy import select

from backend.app.models.driver import Driver
from backend.app.models.vehicle import Vehicle
from backend.app.models.audit_log import AuditLog
from backend.app.models.enums import AccountType, DriverStatus, VehicleType


@pytest.mark.asyncio
async def test_passenger_profile_roundtrip(client, make_passenger, headers_for):
    passenger = await make_passenger(full_name="Meera Iyer")
    headers = headers_for(passenger, AccountType.PASSENGER)

    response = await client.get("/v1/passengers/profile", headers=headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Meera Iyer"
    assert response.json()["avgRatingGiven"] is None

    response = await client.put(
        "/v1/passengers/profile", json={"name": "Meera S. Iyer", "phone": "9898989898"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Meera S. Iyer"
    assert response.json()["phone"] == "9898989898"
    assert response.json()["email"] == passenger.email


@pytest.mark.asyncio
async def test_passenger_phone_clash(client, make_passenger, headers_for):
    await make_passenger(phone="9000000001")
    passenger = await make_passenger()

    response = await client.put(
        "/v1/passengers/profile",
        json={"name": "Asha", "phone": "9000000001"},
        headers=headers_for(passenger, AccountType.PASSENGER)
    )

    assert response.status_code == 409
    assert response.json()["details"]["field"] == "phone"


@pytest.mark.asyncio
async def test_keeping_own_phone_is_not_a_clash(client, make_passenger, headers_for):
    passenger = await make_passenger(phone="9000000002")

    response = await client.put(
        "/v1/passengers/profile",
        json={"name": "Renamed", "phone": "9000000002"},
        headers=headers_for(passenger, AccountType.PASSENGER)
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_driver_profile_counts_vehicles(client, make_driver, headers_for):
    driver = await make_driver(vehicle_type=VehicleType.AUTO)

    response = await client.get("/v1/drivers/profile", headers=headers_for(driver, AccountType.DRIVER))

    assert response.status_code == 200
    body = response.json()
    assert body["licenseNo"] == driver.license_no
    assert body["status"] == "Active"
    assert body["vehicleCount"] == 1


@pytest.mark.asyncio
async def test_driver_profile_update(client, make_driver, headers_for):
    driver = await make_driver()

    response = await client.put(
        "/v1/drivers/profile",
        json={"name": "Ravi K.", "phone": "9777777777"},
        headers=headers_for(driver, AccountType.DRIVER)
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Ravi K."


@pytest.mark.asyncio
async def test_driver_status_change_is_audited(client, db_session, make_driver, headers_for):
    driver = await make_driver()

    response = await client.put(
        "/v1/drivers/status", json={"status": "inactive"}, headers=headers_for(driver, AccountType.DRIVER)
    )

    assert response.status_code == 200
    assert response.json()["status"] == "Inactive"

    result = await db_session.execute(select(Driver.status).where(Driver.id == driver.id))
    assert result.scalar_one() == DriverStatus.INACTIVE

    result = await db_session.execute(
        select(AuditLog.meta_data).where(AuditLog.action == "DRIVER_STATUS_CHANGED", AuditLog.target_id == driver.id)
    )
    assert result.scalar_one() == {"from": "Active", "to": "Inactive"}


@pytest.mark.asyncio
async def test_inactive_driver_is_not_matched(client, make_driver, make_passenger, headers_for):
    driver = await make_driver(vehicle_type=VehicleType.CAR)
    passenger = await make_passenger()

    await client.put(
        "/v1/drivers/status", json={"status": "Suspended"}, headers=headers_for(driver, AccountType.DRIVER)
    )
    response = await client.post(
        "/v1/passengers/rides/request",
        json={"startPoint": "A", "endPoint": "B"},
        headers=headers_for(passenger, AccountType.PASSENGER)
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_add_and_list_vehicles(client, db_session, make_driver, headers_for):
    driver = await make_driver()
    headers = headers_for(driver, AccountType.DRIVER)

    response = await client.post(
        "/v1/drivers/vehicles", json={"model": "Swift Dzire", "capacity": 4, "type": "car"}, headers=headers
    )
    assert response.status_code == 201
    assert response.json()["type"] == "Car"
    assert response.json()["driverId"] == driver.id

    await client.post(
        "/v1/drivers/vehicles", json={"model": "Pulsar", "capacity": 2, "type": "Bike"}, headers=headers
    )

    response = await client.get("/v1/drivers/vehicles", headers=headers)
    assert [v["model"] for v in response.json()] == ["Swift Dzire", "Pulsar"]

    result = await db_session.execute(select(Vehicle.vehicle_type).where(Vehicle.model == "Pulsar"))
    assert result.scalar_one() == VehicleType.BIKE


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"model": "Swift", "capacity": 0, "type": "Car"},
    {"model": "Swift", "capacity": 4, "type": "Hovercraft"},
    {"model": "", "capacity": 4, "type": "Car"},
])
async def test_invalid_vehicle_rejected(client, make_driver, headers_for, payload):
    driver = await make_driver()

    response = await client.post(
        "/v1/drivers/vehicles", json=payload, headers=headers_for(driver, AccountType.DRIVER)
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_role_guards(client, make_driver, make_passenger, headers_for, admin_headers):
    driver_headers = headers_for(await make_driver(), AccountType.DRIVER)
    passenger_headers = headers_for(await make_passenger(), AccountType.PASSENGER)

    assert (await client.get("/v1/drivers/profile", headers=passenger_headers)).status_code == 403
    assert (await client.get("/v1/passengers/profile", headers=driver_headers)).status_code == 403
    assert (await client.post(
        "/v1/drivers/vehicles", json={"model": "X", "capacity": 4, "type": "Car"}, headers=admin_headers
    )).status_code == 403
    assert (await client.get("/v1/payments/history", headers=driver_headers)).status_code == 403
    assert (await client.get("/v1/passengers/profile")).status_code == 401
