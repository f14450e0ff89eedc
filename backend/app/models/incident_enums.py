"""
Accident and traffic report enumerations.
"""

import enum


class AccidentSeverity(str, enum.Enum):
    MINOR = "Minor"
    MAJOR = "Major"
    CRITICAL = "Critical"


class ClaimStatus(str, enum.Enum):
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    CLOSED = "Closed"


class TrafficSeverity(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
