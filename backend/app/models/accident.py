"""
Accident database model.

Incident records reported against rides; read by the incident analytics.
"""

from sqlalchemy import Column, Integer, Text, ForeignKey, DateTime, Enum
from backend.app.db.session import Base
from backend.app.models.incident_enums import AccidentSeverity, ClaimStatus


class Accident(Base):
    __tablename__ = "accidents"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey('rides.id'), nullable=False, index=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False)
    description = Column(Text, nullable=False)
    claim_status = Column(Enum(ClaimStatus), default=ClaimStatus.OPEN, nullable=False)
    severity = Column(Enum(AccidentSeverity), default=AccidentSeverity.MINOR, nullable=False)

    def __repr__(self):
        return f"<Accident(id={self.id}, ride_id={self.ride_id}, severity='{self.severity.value}')>"
