"""
Passenger schemas.
"""

from datetime import datetime
from typing import Optional

from backend.app.schemas.base import ApiModel


class PassengerProfileResponse(ApiModel):
    """
    avgRatingGiven is the mean of the ratings this passenger has given
    drivers, not a rating they received.
    """
    id: int
    name: str
    email: str
    phone: str
    avg_rating_given: Optional[float] = None
    created_at: datetime
