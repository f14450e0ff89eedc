"""
Traffic report database model.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum
from backend.app.db.session import Base
from backend.app.models.incident_enums import TrafficSeverity


class TrafficReport(Base):
    __tablename__ = "traffic_reports"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_id = Column(Integer, ForeignKey('routes.id'), nullable=False, index=True)
    reported_at = Column(DateTime(timezone=True), nullable=False)
    severity = Column(Enum(TrafficSeverity), default=TrafficSeverity.LOW, nullable=False)

    def __repr__(self):
        return f"<TrafficReport(id={self.id}, route_id={self.route_id}, severity='{self.severity.value}')>"
