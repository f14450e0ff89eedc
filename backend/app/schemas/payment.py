"""
Payment schemas.
"""

from datetime import datetime

from pydantic import Field

from backend.app.schemas.base import ApiModel
from backend.app.models.payment_enums import PaymentMode, PaymentStatus


class PaymentCreate(ApiModel):
    ride_id: int
    amount: float = Field(..., ge=0)
    mode: PaymentMode


class PaymentResponse(ApiModel):
    payment_id: int
    ride_id: int
    amount: float
    mode: PaymentMode
    status: PaymentStatus
    payment_date: datetime


class PaymentCreateResponse(PaymentResponse):
    message: str = "Payment processed successfully"


class RefundResponse(PaymentResponse):
    message: str = "Payment refunded successfully"


class PaymentHistoryItem(PaymentResponse):
    ride_date: datetime
