# app/schemas/parking_policy.py
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional


class PolicyUpdate(BaseModel):
    max_vehicles_per_unit: int = Field(ge=1)
    max_consecutive_hours: int = Field(ge=1)
    cooldown_hours: int = Field(ge=0)
    max_extensions: int = Field(ge=0)
    extension_max_hours: int = Field(ge=1)
    operating_start_hour: Optional[int] = Field(default=None, ge=0, le=23)
    operating_end_hour: Optional[int] = Field(default=None, ge=0, le=23)
    allowed_durations: list[int] = Field(min_length=1)
    grace_period_minutes: int = Field(ge=0)
    allow_emergency_override: bool = True

    @field_validator("allowed_durations")
    @classmethod
    def positive_durations(cls, v: list[int]) -> list[int]:
        if any(h <= 0 for h in v):
            raise ValueError("allowed_durations must all be positive hours")
        return sorted(set(v))

    @model_validator(mode="after")
    def operating_hours_paired(self):
        if (self.operating_start_hour is None) != (self.operating_end_hour is None):
            raise ValueError("operating_start_hour and operating_end_hour must both be set or both be empty")
        return self


class PolicyOut(PolicyUpdate):
    facility_id: str
    is_default: bool = False

    class Config:
        from_attributes = True
