# app/models/parking_policy.py
"""
Per-facility parking policy table.
One row per facility. A facility without a row falls back to DEFAULT_POLICY
(see app/services/policy_defaults.py).
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from app.database import Base


class ParkingPolicy(Base):
    __tablename__ = "parking_policies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    facility_id = Column(String(100), unique=True, nullable=False, index=True)
    max_vehicles_per_unit = Column(Integer, default=2, nullable=False)
    max_consecutive_hours = Column(Integer, default=24, nullable=False)
    cooldown_hours = Column(Integer, default=2, nullable=False)
    max_extensions = Column(Integer, default=1, nullable=False)
    extension_max_hours = Column(Integer, default=4, nullable=False)
    operating_start_hour = Column(Integer)   # 0-23, null = open 24/7
    operating_end_hour = Column(Integer)     # 0-23, null = open 24/7
    allowed_durations = Column(JSON, nullable=False)   # list of hours, e.g. [2, 4, 8]
    grace_period_minutes = Column(Integer, default=15, nullable=False)
    allow_emergency_override = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<ParkingPolicy facility={self.facility_id} max_vehicles={self.max_vehicles_per_unit}>"
