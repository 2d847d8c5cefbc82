# app/services/policy_defaults.py
"""
Fallback policy for facilities that have no parking_policies row.
Missing configuration fails open to these limits; it is never reported as an error.
"""

from app.services.validation_types import Policy

DEFAULT_POLICY = Policy(
    max_vehicles_per_unit=2,
    max_consecutive_hours=24,
    cooldown_hours=2,
    max_extensions=1,
    extension_max_hours=4,
    allowed_durations=(2, 4, 8, 12, 24),
    grace_period_minutes=15,
    allow_emergency_override=True,
    operating_start_hour=None,
    operating_end_hour=None,
)
