"""
Tests for the request logging middleware.
"""

import logging

import pytest

from backend.app.models.enums import AccountType


def _request_records(caplog, path):
    return [r for r in caplog.records if r.name == "ridehail" and getattr(r, "path", None) == path]


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client, caplog):
    caplog.set_level(logging.INFO, logger="ridehail")

    response = await client.get("/health", headers={"X-Correlation-ID": "support-ticket-42"})

    assert response.headers["X-Correlation-ID"] == "support-ticket-42"
    assert float(response.headers["X-Process-Time"]) >= 0

    [record] = _request_records(caplog, "/health")
    assert record.correlation_id == "support-ticket-42"
    assert record.account_type == "anonymous"
    assert record.account_id is None


@pytest.mark.asyncio
async def test_correlation_id_generated_when_absent(client):
    first = await client.get("/health")
    second = await client.get("/health")

    assert first.headers["X-Correlation-ID"]
    assert first.headers["X-Correlation-ID"] != second.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_log_line_tagged_with_caller(client, caplog, make_passenger, headers_for):
    caplog.set_level(logging.INFO, logger="ridehail")
    passenger = await make_passenger()

    response = await client.get("/v1/passengers/profile", headers=headers_for(passenger, AccountType.PASSENGER))
    assert response.status_code == 200

    [record] = _request_records(caplog, "/v1/passengers/profile")
    assert record.levelno == logging.INFO
    assert record.account_type == "passenger"
    assert record.account_id == passenger.id


@pytest.mark.asyncio
async def test_rejected_request_logged_as_warning(client, caplog, make_driver, headers_for):
    caplog.set_level(logging.INFO, logger="ridehail")
    driver = await make_driver()
    token = headers_for(driver, AccountType.DRIVER)["Authorization"].split(" ", 1)[1]

    # Legacy header is tagged too
    response = await client.get("/v1/passengers/profile", headers={"x-auth-token": token})
    assert response.status_code == 403

    [record] = _request_records(caplog, "/v1/passengers/profile")
    assert record.levelno == logging.WARNING
    assert record.status_code == 403
    assert record.account_type == "driver"
    assert record.account_id == driver.id


@pytest.mark.asyncio
async def test_invalid_token_left_untagged(client, caplog):
    caplog.set_level(logging.INFO, logger="ridehail")

    response = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401

    [record] = _request_records(caplog, "/v1/auth/me")
    assert record.account_type == "anonymous"
