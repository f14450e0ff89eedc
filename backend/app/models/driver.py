"""
Driver database model.
"""

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Enum, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import DriverStatus


class Driver(Base):
    """
    Driver account.

    avg_rating is the mean of all feedback left for this driver and is only
    written by the rating step of the ride lifecycle.
    """
    __tablename__ = "drivers"
    __table_args__ = (
        CheckConstraint("avg_rating IS NULL OR (avg_rating >= 0 AND avg_rating <= 5)", name="ck_drivers_avg_rating"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    license_no = Column(String(20), unique=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    phone = Column(String(15), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    status = Column(Enum(DriverStatus), default=DriverStatus.ACTIVE, nullable=False, index=True)
    join_date = Column(Date, server_default=func.current_date(), nullable=False)
    avg_rating = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, email='{self.email}', status='{self.status.value}')>"
