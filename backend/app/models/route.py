"""
Route database model.

A route is a (start, end) pair with an estimated distance and duration,
decoupled from any specific ride.
"""

from sqlalchemy import Column, Integer, String, Float, CheckConstraint
from backend.app.db.session import Base


class Route(Base):
    __tablename__ = "routes"
    __table_args__ = (
        CheckConstraint("distance_km > 0", name="ck_routes_distance_positive"),
        CheckConstraint("duration_min > 0", name="ck_routes_duration_positive"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    start_point = Column(String(255), nullable=False, index=True)
    end_point = Column(String(255), nullable=False, index=True)
    distance_km = Column(Float, nullable=False)
    duration_min = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<Route(id={self.id}, start='{self.start_point}', end='{self.end_point}')>"
