"""
Admin schemas.
"""

from datetime import datetime
from typing import List, Optional

from backend.app.schemas.base import ApiModel


class AuditLogResponse(ApiModel):
    """Schema for audit log entry."""
    id: int
    actor_id: Optional[int] = None
    actor_type: Optional[str] = None
    actor_email: Optional[str] = None
    action: str
    target_id: Optional[int] = None
    meta_data: Optional[dict] = None
    ip_address: Optional[str] = None
    timestamp: datetime


class AuditTrailResponse(ApiModel):
    """Schema for audit trail list."""
    logs: List[AuditLogResponse]
    total: int
