"""
Failure Injection Tests.

Validates resilience against payment gateway and Redis failures.
"""

import time

import pytest
from sqlalchemy import select, func

from backend.app.core.reliability import CircuitBreaker, CircuitOpenError, payment_gateway_breaker
from backend.app.domain.payments.payment_service import payment_gateway
from backend.app.models.payment import Payment
from backend.app.models.enums import AccountType, VehicleType


@pytest.mark.asyncio
async def test_circuit_breaker_activates():
    """Test that circuit breaker opens after threshold failures."""
    cb = CircuitBreaker(failure_threshold=2, reset_timeout=1)

    async def failing_func():
        raise ValueError("Boom")

    # Fail 1
    with pytest.raises(ValueError):
        await cb.call(failing_func)

    # Fail 2 (Threshold reached)
    with pytest.raises(ValueError):
        await cb.call(failing_func)

    assert cb.state == "OPEN"

    # Call 3 is rejected without reaching the function
    with pytest.raises(CircuitOpenError):
        await cb.call(failing_func)


@pytest.mark.asyncio
async def test_circuit_breaker_recovers_after_timeout():
    cb = CircuitBreaker(failure_threshold=1, reset_timeout=0)

    async def failing_func():
        raise ValueError("Boom")

    async def healthy_func():
        return "ok"

    with pytest.raises(ValueError):
        await cb.call(failing_func)
    assert cb.state == "OPEN"

    # Timeout elapsed: one trial call goes through and closes the circuit
    time.sleep(0.01)
    assert await cb.call(healthy_func) == "ok"
    assert cb.state == "CLOSED"
    assert cb.failures == 0


@pytest.mark.asyncio
async def test_failed_trial_call_reopens_circuit():
    cb = CircuitBreaker(failure_threshold=3, reset_timeout=0)
    cb.state = "OPEN"

    async def failing_func():
        raise ValueError("Still down")

    time.sleep(0.01)
    with pytest.raises(ValueError):
        await cb.call(failing_func)

    assert cb.state == "OPEN"


@pytest.fixture
async def unpaid_ride(client, make_passenger, make_driver, headers_for):
    passenger = await make_passenger()
    await make_driver(vehicle_type=VehicleType.CAR)
    headers = headers_for(passenger, AccountType.PASSENGER)

    response = await client.post(
        "/v1/passengers/rides/request",
        json={"startPoint": "Delhi CP", "endPoint": "Nehru Place"},
        headers=headers
    )
    return response.json()["id"], headers


@pytest.mark.asyncio
async def test_open_gateway_circuit_rejects_payment(client, db_session, mocker, unpaid_ride):
    ride_id, headers = unpaid_ride
    mocker.patch.object(payment_gateway_breaker, "state", "OPEN")
    mocker.patch.object(payment_gateway_breaker, "last_failure_time", time.time())
    charge = mocker.spy(payment_gateway, "charge")

    response = await client.post(
        "/v1/payments", json={"rideId": ride_id, "amount": 150, "mode": "Card"}, headers=headers
    )

    assert response.status_code == 503
    assert response.json()["error_code"] == "ERR_DEPENDENCY_001"
    charge.assert_not_called()

    result = await db_session.execute(select(func.count(Payment.id)))
    assert result.scalar_one() == 0


@pytest.mark.asyncio
async def test_payment_succeeds_once_circuit_closes(client, mocker, unpaid_ride):
    ride_id, headers = unpaid_ride
    mocker.patch.object(payment_gateway_breaker, "state", "CLOSED")
    mocker.patch.object(payment_gateway_breaker, "failures", 0)

    response = await client.post(
        "/v1/payments", json={"rideId": ride_id, "amount": 150, "mode": "Card"}, headers=headers
    )

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_redis_outage_keeps_requests_working(client, redis_client_session, unpaid_ride):
    """Revocation checks fail open; authenticated reads still succeed."""
    ride_id, headers = unpaid_ride
    await redis_client_session.aclose()

    response = await client.get(f"/v1/rides/{ride_id}", headers=headers)
    assert response.status_code == 200

    response = await client.get("/health")
    assert response.json()["redis"] == "down"
