# app/schemas/parking_pass.py
from pydantic import BaseModel, Field, computed_field, field_validator
from datetime import datetime
from typing import Any, Optional

from app.models.parking_pass import PassStatus
from app.utils.date_time import is_pass_active, is_pass_expired, remaining_minutes
from app.utils.license_plate import format_license_plate, validate_license_plate

LIVE_STATUSES = {PassStatus.ACTIVE, PassStatus.EXTENDED}


class PassCreate(BaseModel):
    facility_id: str = Field(min_length=1)
    unit_id: str = Field(min_length=1)
    license_plate: str
    duration_hours: int = Field(gt=0)
    is_emergency: bool = False
    visitor_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator("license_plate")
    @classmethod
    def plate_format(cls, v: str) -> str:
        ok, error = validate_license_plate(v)
        if not ok:
            raise ValueError(error)
        return v


class PassExtend(BaseModel):
    pass_id: int
    additional_hours: int = Field(gt=0)


class ValidationIssueOut(BaseModel):
    code: str
    message: str
    field: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    class Config:
        from_attributes = True


class ValidationResultOut(BaseModel):
    is_valid: bool
    errors: list[ValidationIssueOut]
    warnings: list[ValidationIssueOut]

    class Config:
        from_attributes = True


class PassOut(BaseModel):
    id: int
    facility_id: str
    unit_id: str
    plate_number: str
    visitor_name: Optional[str]
    start_time: datetime
    end_time: datetime
    duration: int
    status: PassStatus
    extension_count: int
    last_extended_at: Optional[datetime]
    created_at: datetime

    @computed_field
    @property
    def display_plate(self) -> str:
        return format_license_plate(self.plate_number)

    @computed_field
    @property
    def minutes_remaining(self) -> int:
        return remaining_minutes(self.end_time, datetime.utcnow())

    @computed_field
    @property
    def is_active(self) -> bool:
        """Live status and inside its time window right now."""
        return self.status in LIVE_STATUSES and is_pass_active(self.start_time, self.end_time, datetime.utcnow())

    @computed_field
    @property
    def is_expired(self) -> bool:
        return is_pass_expired(self.end_time, datetime.utcnow())

    class Config:
        from_attributes = True


class PassCreated(BaseModel):
    parking_pass: PassOut
    warnings: list[ValidationIssueOut]


class PassExtended(BaseModel):
    parking_pass: PassOut
    previous_end_time: datetime
    new_end_time: datetime
    warnings: list[ValidationIssueOut]
