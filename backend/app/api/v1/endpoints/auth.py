"""
Authentication API endpoints.

Provides register, login, logout and current-account endpoints for the web
client. Passengers and drivers register themselves; admins are seeded.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from backend.app.db.session import get_db
from backend.app.models.passenger import Passenger
from backend.app.models.driver import Driver
from backend.app.models.enums import AccountType, DriverStatus
from backend.app.schemas.auth import RegisterRequest, LoginRequest, AuthResponse, AccountResponse
from backend.app.schemas.base import MessageResponse
from backend.app.core.security import get_password_hash, verify_password
from backend.app.core.jwt import create_account_token
from backend.app.core.dependencies import get_current_user, get_access_token
from backend.app.core.token_revocation import revoke_token
from backend.app.core.exceptions import (
    BusinessValidationError,
    DuplicateAccountError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidUserTypeError,
    ResourceNotFoundError,
)
from backend.app.services.accounts import email_in_use, phone_in_use, find_account_by_email, get_account
from backend.app.services.audit import log_auth_event, AuditAction

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    account_data: RegisterRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a passenger or driver account.

    Rules:
    - Admin accounts cannot be created via API
    - Drivers must supply a license number
    - Email is unique across passengers, drivers and admins
    - Phone (and license number for drivers) is unique per account table
    """
    # 1. Resolve account type
    try:
        account_type = AccountType(account_data.user_type.lower())
    except ValueError:
        raise InvalidUserTypeError(account_data.user_type)

    if account_type == AccountType.ADMIN:
        raise InsufficientPermissionsError("Admin accounts cannot be registered via API")

    if account_type == AccountType.DRIVER and not account_data.license_no:
        raise BusinessValidationError("License number is required for drivers", {"field": "licenseNo"})

    # 2. Uniqueness checks
    if await email_in_use(db, account_data.email):
        raise DuplicateAccountError("email")

    model = Passenger if account_type == AccountType.PASSENGER else Driver
    if await phone_in_use(db, model, account_data.phone):
        raise DuplicateAccountError("phone")

    if account_type == AccountType.DRIVER:
        license_taken = await db.execute(
            select(Driver.id).where(Driver.license_no == account_data.license_no).limit(1)
        )
        if license_taken.first() is not None:
            raise DuplicateAccountError("license_no")

    # 3. Create account
    hashed_password = get_password_hash(account_data.password)
    if account_type == AccountType.PASSENGER:
        account = Passenger(
            full_name=account_data.full_name,
            email=account_data.email,
            phone=account_data.phone,
            hashed_password=hashed_password
        )
    else:
        account = Driver(
            full_name=account_data.full_name,
            email=account_data.email,
            phone=account_data.phone,
            license_no=account_data.license_no,
            hashed_password=hashed_password,
            status=DriverStatus.ACTIVE
        )

    db.add(account)
    try:
        await db.commit()
    except IntegrityError as exc:
        # Concurrent registration won the unique constraint
        await db.rollback()
        raise DuplicateAccountError() from exc
    await db.refresh(account)

    await log_auth_event(
        db=db,
        action=AuditAction.ACCOUNT_REGISTERED,
        account_id=account.id,
        account_type=account_type.value,
        email=account.email,
        ip_address=_client_ip(request)
    )

    return AuthResponse(
        token=create_account_token(account.id, account_type.value, account.email),
        user=AccountResponse.from_account(account_type, account)
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login and return a JWT token.

    Unknown email and wrong password get the same error so that accounts
    cannot be enumerated. Both outcomes are written to the audit log.
    """
    found = await find_account_by_email(db, credentials.email)

    if found is None:
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            account_id=None,
            account_type=None,
            email=credentials.email,
            ip_address=_client_ip(request),
            metadata={"reason": "Account not found"}
        )
        raise InvalidCredentialsError()

    account_type, account = found

    if not verify_password(credentials.password, account.hashed_password):
        await log_auth_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            account_id=account.id,
            account_type=account_type.value,
            email=account.email,
            ip_address=_client_ip(request),
            metadata={"reason": "Invalid password"}
        )
        raise InvalidCredentialsError()

    token = create_account_token(account.id, account_type.value, account.email)

    await log_auth_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        account_id=account.id,
        account_type=account_type.value,
        email=account.email,
        ip_address=_client_ip(request)
    )

    return AuthResponse(token=token, user=AccountResponse.from_account(account_type, account))


@router.get("/me", response_model=AccountResponse)
async def get_me(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the authenticated account's profile.

    Raises:
        404: If the account no longer exists
    """
    account_type = AccountType(current_user["type"])
    account = await get_account(db, account_type, current_user["user_id"])

    if not account:
        raise ResourceNotFoundError("Account", current_user["user_id"])

    return AccountResponse.from_account(account_type, account)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    token: str = Depends(get_access_token),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the presented token until it expires.
    """
    revoked = await revoke_token(token, current_user["user_id"], current_user.get("exp"))
    if not revoked:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Logout is temporarily unavailable, please retry"
        )

    await log_auth_event(
        db=db,
        action=AuditAction.LOGOUT,
        account_id=current_user["user_id"],
        account_type=current_user["type"],
        email=current_user.get("sub"),
        ip_address=_client_ip(request)
    )

    return MessageResponse(message="Logged out successfully")
