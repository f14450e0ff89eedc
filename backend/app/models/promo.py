"""
Promo code database model.

Rides can reference an applied promo; no endpoint applies one yet.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Text, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Promo(Base):
    __tablename__ = "promos"
    __table_args__ = (
        CheckConstraint("discount_percent >= 0 AND discount_percent <= 100", name="ck_promos_discount_range"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    code = Column(String(20), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    expiry_date = Column(Date, nullable=False)
    discount_percent = Column(Float, nullable=False)
    min_fare = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Promo(id={self.id}, code='{self.code}')>"
