"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import EmailStr, Field

from backend.app.schemas.base import ApiModel
from backend.app.models.enums import AccountType


class RegisterRequest(ApiModel):
    """
    Schema for account registration.

    Used by POST /auth/register. ``userType`` is validated by the endpoint so
    that an unknown type is reported as a business error, not a 422.
    """
    full_name: str = Field(..., min_length=1, max_length=100, description="Full name")
    email: EmailStr = Field(..., description="Email, unique across all account types")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    phone: str = Field(..., min_length=5, max_length=15, description="Phone number")
    user_type: str = Field(..., description="passenger or driver")
    license_no: Optional[str] = Field(default=None, max_length=20, description="Required for drivers")


class LoginRequest(ApiModel):
    email: EmailStr
    password: str


class ProfileUpdate(ApiModel):
    """Name and phone are the only editable profile fields."""
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=5, max_length=15)


class AccountResponse(ApiModel):
    """
    Profile of the authenticated account.

    Fields that do not apply to the account type are null.
    """
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    type: AccountType
    # Passenger
    avg_rating_given: Optional[float] = None
    # Driver
    license_no: Optional[str] = None
    status: Optional[str] = None
    join_date: Optional[date] = None
    avg_rating: Optional[float] = None
    # Admin
    role: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account_type: AccountType, account: Any) -> "AccountResponse":
        data = {
            "id": account.id,
            "name": getattr(account, "full_name", None) or getattr(account, "name", ""),
            "email": account.email,
            "phone": account.phone,
            "type": account_type,
            "created_at": account.created_at,
        }

        if account_type == AccountType.PASSENGER:
            data["avg_rating_given"] = account.avg_rating_given
        elif account_type == AccountType.DRIVER:
            data.update(
                license_no=account.license_no,
                status=account.status.value,
                join_date=account.join_date,
                avg_rating=account.avg_rating,
            )
        else:
            data["role"] = account.role.value

        return cls(**data)


class AuthResponse(ApiModel):
    """
    Returned by successful register/login operations.
    """
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: AccountResponse
