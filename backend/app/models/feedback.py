"""
Feedback database model.

Inserting feedback is the only trigger for recomputing the driver's and
the passenger's average ratings.
"""

from sqlalchemy import Column, Integer, Float, Text, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Feedback(Base):
    __tablename__ = "feedback"
    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_feedback_rating_range"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # One feedback per ride
    ride_id = Column(Integer, ForeignKey('rides.id'), unique=True, nullable=False, index=True)
    passenger_id = Column(Integer, ForeignKey('passengers.id'), nullable=False, index=True)
    driver_id = Column(Integer, ForeignKey('drivers.id'), nullable=False, index=True)

    rating = Column(Float, nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Feedback(id={self.id}, ride_id={self.ride_id}, rating={self.rating})>"
