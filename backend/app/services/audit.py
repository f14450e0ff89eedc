"""
Audit logging service for tracking authentication events and ride actions.

Provides centralized logging for support, dispute handling and security
monitoring.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    # Accounts
    ACCOUNT_REGISTERED = "ACCOUNT_REGISTERED"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    PROFILE_UPDATED = "PROFILE_UPDATED"

    # Drivers & vehicles
    DRIVER_STATUS_CHANGED = "DRIVER_STATUS_CHANGED"
    VEHICLE_ADDED = "VEHICLE_ADDED"

    # Ride lifecycle
    RIDE_REQUESTED = "RIDE_REQUESTED"
    RIDE_CREATED = "RIDE_CREATED"
    RIDE_STATUS_CHANGED = "RIDE_STATUS_CHANGED"
    RIDE_CANCELLED = "RIDE_CANCELLED"
    RIDE_RATED = "RIDE_RATED"

    # Payments
    PAYMENT_PROCESSED = "PAYMENT_PROCESSED"
    PAYMENT_REFUNDED = "PAYMENT_REFUNDED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_type: Optional[str] = None,
    actor_email: Optional[str] = None,
    target_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Log an event to the audit log.

    Called after the business transaction has been committed, so an audit
    write never rolls back the action it describes.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: ID of the account performing the action
        actor_type: passenger / driver / admin
        actor_email: Email of the actor
        target_id: ID of the ride/payment/vehicle acted upon
        metadata: Additional context as JSON
        ip_address: IP address of the request

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_type=actor_type,
        actor_email=actor_email,
        action=action,
        target_id=target_id,
        meta_data=metadata,
        ip_address=ip_address
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def log_account_action(
    db: AsyncSession,
    current_user: dict,
    action: str,
    target_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Log an action performed by the authenticated caller.

    Args:
        db: Database session
        current_user: Decoded token payload of the caller
        action: Action performed (use AuditAction constants)
        target_id: ID of the entity acted upon
        metadata: Additional context

    Returns:
        Created AuditLog instance
    """
    return await log_event(
        db=db,
        action=action,
        actor_id=current_user.get("user_id"),
        actor_type=current_user.get("type"),
        actor_email=current_user.get("sub"),
        target_id=target_id,
        metadata=metadata
    )


async def log_auth_event(
    db: AsyncSession,
    action: str,
    account_id: Optional[int],
    account_type: Optional[str],
    email: Optional[str],
    ip_address: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Log an authentication event (login success/failure, registration).

    Args:
        db: Database session
        action: AuditAction.LOGIN_SUCCESS, LOGIN_FAILED or ACCOUNT_REGISTERED
        account_id: ID of the account, None when the email is unknown
        account_type: passenger / driver / admin, None when unknown
        email: Email used in the attempt
        ip_address: IP address of the attempt
        metadata: Additional context (e.g., failure reason)

    Returns:
        Created AuditLog instance
    """
    return await log_event(
        db=db,
        action=action,
        actor_id=account_id,
        actor_type=account_type,
        actor_email=email,
        ip_address=ip_address,
        metadata=metadata
    )


async def get_audit_trail(
    db: AsyncSession,
    target_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Args:
        db: Database session
        target_id: Filter by target entity ID
        action: Filter by action type
        limit: Maximum number of records to return

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if target_id:
        query = query.where(AuditLog.target_id == target_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
