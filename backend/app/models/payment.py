"""
Payment database model.

At most one payment per ride (unique ride_id).
"""

from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.payment_enums import PaymentMode, PaymentStatus


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey('rides.id'), unique=True, nullable=False, index=True)

    amount = Column(Float, nullable=False)
    mode = Column(Enum(PaymentMode), nullable=False)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)

    payment_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, ride_id={self.ride_id}, status='{self.status.value}')>"
