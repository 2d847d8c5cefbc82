# app/services/extension_validation_service.py
"""
Pass-extension rule engine.

One fetch (the pass plus its facility policy), then four independent checks,
all reported. A missing pass is the only early return. No warnings are defined
for extensions.

Applying a valid extension (new end time, extension count, EXTENDED status)
is done by the caller, see app/services/pass_service.py.
"""

from datetime import datetime
from typing import Optional

from app.models.parking_pass import PassStatus
from app.services.policy_defaults import DEFAULT_POLICY
from app.services.validation_types import (
    EXTENSION_TOO_LONG, INVALID_STATUS, MAX_EXTENSIONS_EXCEEDED, NOT_FOUND, PASS_EXPIRED,
    Authorization, Policy, ValidationIssue, ValidationResult,
)
from app.utils.date_time import is_expired_beyond_grace, plural
from app.utils.logger import get_logger

logger = get_logger(__name__)

NON_EXTENDABLE_STATUSES = {PassStatus.CANCELLED, PassStatus.SUSPENDED}


def check_extension(auth: Authorization, policy: Policy, additional_hours: int,
                    now: datetime) -> ValidationResult:
    """Pure rule evaluation for an already-fetched pass."""
    errors = []

    if auth.extension_count >= policy.max_extensions:
        errors.append(ValidationIssue(
            code=MAX_EXTENSIONS_EXCEEDED,
            message=(f"Maximum {plural(policy.max_extensions, 'extension')} allowed. "
                     f"This pass has already been extended {plural(auth.extension_count, 'time')}."),
            metadata={"currentExtensions": auth.extension_count, "maxAllowed": policy.max_extensions},
        ))

    if additional_hours > policy.extension_max_hours:
        errors.append(ValidationIssue(
            code=EXTENSION_TOO_LONG,
            message=(f"Extension cannot exceed {plural(policy.extension_max_hours, 'hour')}. "
                     f"Requested: {plural(additional_hours, 'hour')}."),
            metadata={"requestedHours": additional_hours, "maxAllowed": policy.extension_max_hours},
        ))

    if is_expired_beyond_grace(auth.end_time, policy.grace_period_minutes, now):
        errors.append(ValidationIssue(
            code=PASS_EXPIRED,
            message=(f"Pass expired more than {policy.grace_period_minutes} minutes ago "
                     f"and cannot be extended."),
            metadata={"expiredAt": auth.end_time, "gracePeriodMinutes": policy.grace_period_minutes},
        ))

    if auth.status in NON_EXTENDABLE_STATUSES:
        errors.append(ValidationIssue(
            code=INVALID_STATUS,
            message=f"Cannot extend a {auth.status.value.lower()} pass.",
            metadata={"status": auth.status.value},
        ))

    return ValidationResult(errors=errors)


async def validate_pass_extension(repo, authorization_id: int, additional_hours: int,
                                  now: Optional[datetime] = None,
                                  default_policy: Policy = DEFAULT_POLICY) -> ValidationResult:
    """
    Validate extending pass `authorization_id` by `additional_hours`.
    A facility without a configured policy is judged against `default_policy`.
    """
    now = now or datetime.utcnow()
    try:
        found = await repo.fetch_authorization_with_policy(authorization_id)
        if found is None:
            return ValidationResult(errors=[ValidationIssue(
                code=NOT_FOUND, message="Parking pass not found",
            )])

        auth, policy = found
        result = check_extension(auth, policy or default_policy, additional_hours, now)
    except Exception as e:
        logger.error(f"Extension validation error for pass {authorization_id}: {e}", exc_info=True)
        return ValidationResult.internal_error()

    logger.debug(
        f"[EXTEND] pass={authorization_id} +{additional_hours}h valid={result.is_valid} "
        f"errors={[e.code for e in result.errors]}"
    )
    return result
