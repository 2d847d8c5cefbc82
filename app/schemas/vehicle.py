# app/schemas/vehicle.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from app.models.violation import ViolationSeverity
from app.utils.license_plate import validate_license_plate


class VehicleCreate(BaseModel):
    license_plate: str
    make: Optional[str] = Field(default=None, max_length=50)
    model: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=30)

    @field_validator("license_plate")
    @classmethod
    def plate_format(cls, v: str) -> str:
        ok, error = validate_license_plate(v)
        if not ok:
            raise ValueError(error)
        return v


class BlacklistUpdate(BaseModel):
    reason: Optional[str] = None
    blacklisted_by: str = Field(min_length=1)


class VehicleOut(BaseModel):
    id: int
    normalized_plate: str
    license_plate: str
    make: Optional[str]
    model: Optional[str]
    color: Optional[str]
    is_blacklisted: bool
    blacklist_reason: Optional[str]
    blacklisted_at: Optional[datetime]
    blacklisted_by: Optional[str]
    violation_count: int
    risk_score: int

    class Config:
        from_attributes = True


class ViolationCreate(BaseModel):
    violation_type: str = Field(min_length=1, max_length=50)
    severity: ViolationSeverity = ViolationSeverity.MEDIUM
    description: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=100)
    fine_amount: Optional[float] = Field(default=None, ge=0)
    logged_by: Optional[str] = Field(default=None, max_length=100)


class ViolationOut(BaseModel):
    id: int
    vehicle_id: int
    violation_type: str
    severity: ViolationSeverity
    description: Optional[str]
    location: Optional[str]
    fine_amount: Optional[float]
    logged_by: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ViolationLogged(BaseModel):
    violation: ViolationOut
    vehicle: VehicleOut
