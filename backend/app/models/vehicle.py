"""
Vehicle database model.

Drivers register vehicles; a vehicle belongs to exactly one driver.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import VehicleType


class Vehicle(Base):
    """
    Vehicle model.

    Created by the owning driver, or automatically when the trusted ride
    creation path picks a driver that has no vehicle yet.
    """
    __tablename__ = "vehicles"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_vehicles_capacity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Ownership - Vehicle belongs to Driver
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=False, index=True)

    model = Column(String(50), nullable=False)
    capacity = Column(Integer, nullable=False)
    vehicle_type = Column(Enum(VehicleType), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Vehicle(id={self.id}, model='{self.model}', driver_id={self.driver_id})>"
