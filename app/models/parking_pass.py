# app/models/parking_pass.py
"""
Visitor parking passes (authorizations).
Created after a successful pass-request validation, mutated only after a
successful extension validation. Soft-deleted rows (deleted_at set) are
invisible to every rule-engine fetch.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from app.database import Base


class PassStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXTENDED = "EXTENDED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    SUSPENDED = "SUSPENDED"


class ParkingPass(Base):
    __tablename__ = "parking_passes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    facility_id = Column(String(100), nullable=False, index=True)
    unit_id = Column(String(100), nullable=False, index=True)
    plate_number = Column(String(20), nullable=False, index=True)   # normalized
    vehicle_id = Column(Integer)              # FK to vehicles.id
    visitor_name = Column(String(100))
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False, index=True)
    duration = Column(Integer, nullable=False)        # hours as issued
    status = Column(Enum(PassStatus), default=PassStatus.ACTIVE, nullable=False, index=True)
    is_emergency = Column(Integer, default=0, nullable=False)
    extension_count = Column(Integer, default=0, nullable=False)
    last_extended_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, index=True)
    deleted_at = Column(DateTime)

    def __repr__(self):
        return f"<ParkingPass {self.id} plate={self.plate_number} status={self.status}>"
