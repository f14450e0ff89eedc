"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict

logger = logging.getLogger("ridehail")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


# Validation errors

class BusinessValidationError(AppException):
    """Raised when a request is well-formed but fails a business rule check."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidUserTypeError(AppException):
    def __init__(self, user_type: Any):
        super().__init__(
            message="Invalid user type",
            error_code="ERR_VALIDATION_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"user_type": user_type}
        )


# Not-found errors

class ResourceNotFoundError(AppException):
    """
    Raised when requested resource is not found.

    Also raised when the resource exists but is not visible to the caller,
    so that callers cannot discover other accounts' rides or payments.
    """

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class NoDriversAvailableError(AppException):
    def __init__(self, vehicle_type: str):
        super().__init__(
            message="No drivers available",
            error_code="ERR_NOT_FOUND_002",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"vehicle_type": vehicle_type}
        )


# State-conflict errors

class StateConflictError(AppException):
    """Base for checked-before-write state violations."""

    def __init__(self, message: str, error_code: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_409_CONFLICT,
            details=details
        )


class InvalidTransitionError(StateConflictError):
    """Raised when a ride status change is not an edge of the ride state machine."""

    def __init__(self, current: str, target: str, message: str = None):
        super().__init__(
            message=message or f"Cannot change ride status from {current} to {target}",
            error_code="ERR_RIDE_001",
            details={"current_status": current, "target_status": target}
        )


class AlreadyTerminalError(StateConflictError):
    def __init__(self, current: str):
        super().__init__(
            message=f"Cannot cancel a {current.lower()} ride",
            error_code="ERR_RIDE_002",
            details={"current_status": current}
        )


class RideNotCompletedError(StateConflictError):
    def __init__(self, current: str):
        super().__init__(
            message="Can only rate completed rides",
            error_code="ERR_RIDE_003",
            details={"current_status": current}
        )


class AlreadyRatedError(StateConflictError):
    def __init__(self, ride_id: int):
        super().__init__(
            message="You have already rated this ride",
            error_code="ERR_RIDE_004",
            details={"ride_id": ride_id}
        )


class PaymentAlreadyExistsError(StateConflictError):
    def __init__(self, ride_id: int):
        super().__init__(
            message="A payment has already been recorded for this ride",
            error_code="ERR_PAY_001",
            details={"ride_id": ride_id}
        )


class PaymentNotRefundableError(StateConflictError):
    def __init__(self, payment_id: int, current: str):
        super().__init__(
            message=f"Only successful payments can be refunded, current status: {current}",
            error_code="ERR_PAY_002",
            details={"payment_id": payment_id, "current_status": current}
        )


class DuplicateAccountError(StateConflictError):
    def __init__(self, field: str = "email"):
        super().__init__(
            message="User already exists",
            error_code="ERR_ACCOUNT_001",
            details={"field": field}
        )


# Authentication / authorization errors

class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class TokenRevokedError(AppException):
    """Raised when token has been revoked."""

    def __init__(self):
        super().__init__(
            message="Token has been revoked",
            error_code="ERR_AUTH_002",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class InvalidCredentialsError(AppException):
    """Same error for unknown email and wrong password."""

    def __init__(self):
        super().__init__(
            message="Invalid credentials",
            error_code="ERR_AUTH_003",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


# Dependency errors

class PaymentGatewayUnavailableError(AppException):
    def __init__(self):
        super().__init__(
            message="Payment gateway is temporarily unavailable",
            error_code="ERR_DEPENDENCY_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": jsonable_encoder(exc.details)
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_encoder(exc.errors())
            }
        }
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handler for database failures (connection loss, unexpected constraint violations)."""
    logger.error(
        "Database error on %s %s: %s",
        request.method, request.url.path, type(exc).__name__,
        exc_info=exc
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_DATABASE",
            "message": "A database error occurred",
            "details": {}
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method, request.url.path, type(exc).__name__,
        exc_info=exc
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
