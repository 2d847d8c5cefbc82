# app/services/validation_types.py
"""
Immutable snapshots the pass rule engines evaluate, plus the result shape
they return. Codes are a closed vocabulary: API clients map them to HTTP
status codes and user-facing copy, so renaming one is a breaking change.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from app.models.parking_pass import PassStatus

# ── Error codes ──────────────────────────────────────────────────────────────
BLACKLISTED = "BLACKLISTED"
MAX_VEHICLES_EXCEEDED = "MAX_VEHICLES_EXCEEDED"
MAX_CONSECUTIVE_HOURS = "MAX_CONSECUTIVE_HOURS"
COOLDOWN_PERIOD = "COOLDOWN_PERIOD"
INVALID_DURATION = "INVALID_DURATION"
OUTSIDE_OPERATING_HOURS = "OUTSIDE_OPERATING_HOURS"
MAX_EXTENSIONS_EXCEEDED = "MAX_EXTENSIONS_EXCEEDED"
EXTENSION_TOO_LONG = "EXTENSION_TOO_LONG"
PASS_EXPIRED = "PASS_EXPIRED"
INVALID_STATUS = "INVALID_STATUS"
NOT_FOUND = "NOT_FOUND"
INTERNAL_ERROR = "INTERNAL_ERROR"

# ── Warning codes ────────────────────────────────────────────────────────────
EMERGENCY_OVERRIDE = "EMERGENCY_OVERRIDE"
LONG_DURATION = "LONG_DURATION"
VIOLATION_HISTORY = "VIOLATION_HISTORY"
HIGH_RISK_VEHICLE = "HIGH_RISK_VEHICLE"
APPROACHING_VEHICLE_LIMIT = "APPROACHING_VEHICLE_LIMIT"

INTERNAL_ERROR_MESSAGE = "An error occurred during validation. Please try again."


@dataclass(frozen=True)
class Policy:
    max_vehicles_per_unit: int
    max_consecutive_hours: int
    cooldown_hours: int
    max_extensions: int
    extension_max_hours: int
    allowed_durations: tuple[int, ...]
    grace_period_minutes: int
    allow_emergency_override: bool
    operating_start_hour: Optional[int] = None   # both None = open 24/7
    operating_end_hour: Optional[int] = None


@dataclass(frozen=True)
class VehicleRecord:
    normalized_plate: str
    is_blacklisted: bool = False
    blacklist_reason: Optional[str] = None
    blacklisted_at: Optional[datetime] = None
    blacklisted_by: Optional[str] = None
    violation_count: int = 0
    risk_score: int = 0


@dataclass(frozen=True)
class PassWindow:
    start_time: datetime
    end_time: datetime
    duration: int   # hours as issued


@dataclass(frozen=True)
class Authorization:
    id: int
    status: PassStatus
    end_time: datetime
    extension_count: int
    facility_id: str


@dataclass
class ValidationIssue:
    code: str
    message: str
    field: Optional[str] = None          # never set on warnings
    metadata: Optional[dict[str, Any]] = None


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def has_error(self, code: str) -> bool:
        return any(e.code == code for e in self.errors)

    def has_warning(self, code: str) -> bool:
        return any(w.code == code for w in self.warnings)

    @classmethod
    def internal_error(cls) -> "ValidationResult":
        return cls(errors=[ValidationIssue(code=INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE)])
