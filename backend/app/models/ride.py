"""
Ride database model.

The ride is the central fact table: it references the passenger, the
assigned driver, the route and (optionally) the vehicle.
"""

from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ride_enums import RideStatus


class Ride(Base):
    """
    Ride model.

    Status only moves along the edges in domain/rides/state_machine.py;
    Completed and Cancelled are terminal.
    """
    __tablename__ = "rides"
    __table_args__ = (
        CheckConstraint("fare >= 0", name="ck_rides_fare_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    passenger_id = Column(Integer, ForeignKey('passengers.id'), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=False, index=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id'), nullable=True, index=True)
    applied_promo_id = Column(Integer, ForeignKey('promos.id'), nullable=True)

    fare = Column(Float, nullable=False)
    status = Column(Enum(RideStatus), default=RideStatus.REQUESTED, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Ride(id={self.id}, passenger_id={self.passenger_id}, status='{self.status.value}')>"
