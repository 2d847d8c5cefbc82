# app/models/vehicle.py
"""
Known vehicles table, keyed by normalized plate.
Holds blacklist state and violation history read by the pass rule engine.
A plate with no row is treated as a clean, first-time vehicle.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    normalized_plate = Column(String(20), unique=True, nullable=False, index=True)
    license_plate = Column(String(50), nullable=False)    # as entered by the visitor
    make = Column(String(50))
    model = Column(String(50))
    color = Column(String(30))
    is_blacklisted = Column(Boolean, default=False, nullable=False)
    blacklist_reason = Column(Text)
    blacklisted_at = Column(DateTime)
    blacklisted_by = Column(String(100))
    violation_count = Column(Integer, default=0, nullable=False)
    risk_score = Column(Integer, default=0, nullable=False)   # 0-100
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Vehicle {self.normalized_plate} blacklisted={self.is_blacklisted}>"
