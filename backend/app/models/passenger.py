"""
Passenger database model.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Passenger(Base):
    """
    Passenger account.

    avg_rating_given is the mean of the ratings this passenger has given
    to drivers, recomputed whenever they leave feedback. It is not a rating
    the passenger has received.
    """
    __tablename__ = "passengers"
    __table_args__ = (
        CheckConstraint("avg_rating_given IS NULL OR (avg_rating_given >= 0 AND avg_rating_given <= 5)", name="ck_passengers_avg_rating_given"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    phone = Column(String(15), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    avg_rating_given = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Passenger(id={self.id}, email='{self.email}')>"
