# app/models/violation.py
"""
Logged parking violations.
Each row bumps the offending vehicle's violation_count and risk_score,
which the pass rule engine reads back as VIOLATION_HISTORY / HIGH_RISK_VEHICLE warnings.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum, Float, ForeignKey, Text
from app.database import Base


class ViolationSeverity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Violation(Base):
    __tablename__ = "violations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    violation_type = Column(String(50), nullable=False)   # e.g. "OVERSTAY", "UNAUTHORIZED_SPOT"
    severity = Column(Enum(ViolationSeverity), nullable=False, default=ViolationSeverity.MEDIUM)
    description = Column(Text)
    location = Column(String(100))
    fine_amount = Column(Float)
    logged_by = Column(String(100))
    created_at = Column(DateTime, index=True)

    def __repr__(self):
        return f"<Violation {self.violation_type} vehicle={self.vehicle_id} [{self.severity}]>"
