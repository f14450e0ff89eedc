"""
Audit Log Database Model.

Tracks authentication events and ride/payment actions for support and
dispute handling.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model.

    Events logged:
    - LOGIN_SUCCESS / LOGIN_FAILED / ACCOUNT_REGISTERED / LOGOUT
    - RIDE_REQUESTED / RIDE_CREATED / RIDE_STATUS_CHANGED / RIDE_CANCELLED / RIDE_RATED
    - PAYMENT_PROCESSED / PAYMENT_REFUNDED
    - DRIVER_STATUS_CHANGED / VEHICLE_ADDED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions or unknown accounts)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_type = Column(String(20), nullable=True)
    actor_email = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Entity acted upon (ride id, payment id, ...)
    target_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # IP address for login tracking
    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_email}, target={self.target_id})>"
