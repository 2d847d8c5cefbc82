# app/services/pass_validation_service.py
"""
Pass-request rule engine.

Decides whether a new visitor pass may be issued. The four reads (policy,
vehicle, active passes for the unit, recent history for the plate) are issued
together and joined before any rule runs. Every error rule then runs in a fixed
order and all failures are reported, followed by the non-blocking warnings.

The engine only advises: it never writes. Creating the pass is the caller's job
(app/services/pass_service.py).
"""

from dataclasses import dataclass
from datetime import datetime
import asyncio
from typing import Callable, Optional

from app.services.policy_defaults import DEFAULT_POLICY
from app.services.validation_types import (
    APPROACHING_VEHICLE_LIMIT, BLACKLISTED, COOLDOWN_PERIOD, EMERGENCY_OVERRIDE,
    HIGH_RISK_VEHICLE, INVALID_DURATION, LONG_DURATION, MAX_CONSECUTIVE_HOURS,
    MAX_VEHICLES_EXCEEDED, OUTSIDE_OPERATING_HOURS, VIOLATION_HISTORY,
    PassWindow, Policy, ValidationIssue, ValidationResult, VehicleRecord,
)
from app.utils.date_time import (
    calculate_consecutive_hours, facility_local_time, format_hour,
    hours_until_cooldown_ends, is_cooldown_period_over, is_within_operating_hours,
    ordinal_suffix, plural,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)

BLACKLISTED_DEFAULT_MESSAGE = "This vehicle is not permitted to park"
LONG_DURATION_HOURS = 24
HIGH_RISK_SCORE = 50


@dataclass
class PassRequest:
    facility_id: str
    normalized_plate: str
    unit_id: str
    duration_hours: int
    is_emergency: bool = False


@dataclass
class RequestContext:
    """Everything the rules may look at, fetched up front."""
    request: PassRequest
    policy: Policy
    vehicle: Optional[VehicleRecord]
    active_count: int
    recent_windows: list[PassWindow]
    now: datetime
    local_now: datetime

    @property
    def last_window(self) -> Optional[PassWindow]:
        if not self.recent_windows:
            return None
        return max(self.recent_windows, key=lambda w: w.end_time)

    @property
    def consecutive_hours(self) -> int:
        return calculate_consecutive_hours(self.recent_windows)


Rule = tuple[Callable[[RequestContext], bool], Callable[[RequestContext], ValidationIssue]]


# ── 1. Blacklist ─────────────────────────────────────────────────────────────

def _is_blacklisted(ctx: RequestContext) -> bool:
    return bool(ctx.vehicle and ctx.vehicle.is_blacklisted)


def _blacklisted_error(ctx: RequestContext) -> ValidationIssue:
    return ValidationIssue(
        code=BLACKLISTED,
        message=ctx.vehicle.blacklist_reason or BLACKLISTED_DEFAULT_MESSAGE,
        field="plate",
        metadata={
            "blacklistedAt": ctx.vehicle.blacklisted_at,
            "blacklistedBy": ctx.vehicle.blacklisted_by,
        },
    )


# ── 2. Vehicles per unit ─────────────────────────────────────────────────────

def _unit_is_full(ctx: RequestContext) -> bool:
    return ctx.active_count >= ctx.policy.max_vehicles_per_unit


def _unit_full_error(ctx: RequestContext) -> ValidationIssue:
    limit = ctx.policy.max_vehicles_per_unit
    return ValidationIssue(
        code=MAX_VEHICLES_EXCEEDED,
        message=(f"Maximum {plural(limit, 'vehicle')} allowed per unit at one time. "
                 f"Currently {ctx.active_count} registered."),
        field="unit",
        metadata={"maxAllowed": limit, "currentCount": ctx.active_count},
    )


# ── 3. Consecutive hours ─────────────────────────────────────────────────────

def _exceeds_consecutive_hours(ctx: RequestContext) -> bool:
    return ctx.consecutive_hours + ctx.request.duration_hours > ctx.policy.max_consecutive_hours


def _consecutive_hours_error(ctx: RequestContext) -> ValidationIssue:
    current = ctx.consecutive_hours
    return ValidationIssue(
        code=MAX_CONSECUTIVE_HOURS,
        message=(f"Vehicle has {current} consecutive hours. "
                 f"Maximum {ctx.policy.max_consecutive_hours} hours allowed. "
                 f"Adding {ctx.request.duration_hours} hours would exceed limit."),
        field="duration",
        metadata={
            "currentConsecutiveHours": current,
            "requestedHours": ctx.request.duration_hours,
            "maxAllowed": ctx.policy.max_consecutive_hours,
        },
    )


# ── 4. Cooldown ──────────────────────────────────────────────────────────────

def _in_cooldown(ctx: RequestContext) -> bool:
    last = ctx.last_window
    if last is None:
        return False
    return not is_cooldown_period_over(last.end_time, ctx.policy.cooldown_hours, ctx.now)


def _cooldown_error(ctx: RequestContext) -> ValidationIssue:
    last = ctx.last_window
    cooldown = ctx.policy.cooldown_hours
    remaining = hours_until_cooldown_ends(last.end_time, cooldown, ctx.now)
    return ValidationIssue(
        code=COOLDOWN_PERIOD,
        message=(f"Vehicle must wait {plural(cooldown, 'hour')} after last pass expires. "
                 f"{plural(remaining, 'hour')} remaining."),
        field="plate",
        metadata={
            "cooldownHours": cooldown,
            "hoursRemaining": remaining,
            "lastPassEndTime": last.end_time,
        },
    )


# ── 5. Duration ──────────────────────────────────────────────────────────────

def _duration_not_offered(ctx: RequestContext) -> bool:
    return ctx.request.duration_hours not in ctx.policy.allowed_durations


def _duration_error(ctx: RequestContext) -> ValidationIssue:
    requested = ctx.request.duration_hours
    allowed = list(ctx.policy.allowed_durations)
    return ValidationIssue(
        code=INVALID_DURATION,
        message=(f"{plural(requested, 'hour')} is not an available duration. "
                 f"Allowed: {', '.join(str(h) for h in allowed)} hours."),
        field="duration",
        metadata={"requestedDuration": requested, "allowedDurations": allowed},
    )


# ── 6. Operating hours ───────────────────────────────────────────────────────

def _outside_operating_hours(ctx: RequestContext) -> bool:
    return not is_within_operating_hours(
        ctx.policy.operating_start_hour, ctx.policy.operating_end_hour, ctx.local_now
    )


def _operating_hours_error(ctx: RequestContext) -> ValidationIssue:
    start = ctx.policy.operating_start_hour
    end = ctx.policy.operating_end_hour
    return ValidationIssue(
        code=OUTSIDE_OPERATING_HOURS,
        message=f"Visitor parking is only available between {format_hour(start)} and {format_hour(end)}.",
        metadata={"operatingHours": {"start": start, "end": end}},
    )


# ── Warnings ─────────────────────────────────────────────────────────────────

def _is_long_duration(ctx: RequestContext) -> bool:
    return ctx.request.duration_hours >= LONG_DURATION_HOURS


def _long_duration_warning(ctx: RequestContext) -> ValidationIssue:
    hours = ctx.request.duration_hours
    return ValidationIssue(
        code=LONG_DURATION,
        message=f"Pass duration is {hours} hours. Ensure this is intentional.",
        metadata={"durationHours": hours},
    )


def _has_violations(ctx: RequestContext) -> bool:
    return bool(ctx.vehicle and ctx.vehicle.violation_count > 0)


def _violation_history_warning(ctx: RequestContext) -> ValidationIssue:
    count = ctx.vehicle.violation_count
    return ValidationIssue(
        code=VIOLATION_HISTORY,
        message=f"This vehicle has {plural(count, 'previous violation')}.",
        metadata={"violationCount": count, "riskScore": ctx.vehicle.risk_score},
    )


def _is_high_risk(ctx: RequestContext) -> bool:
    return bool(ctx.vehicle and ctx.vehicle.risk_score >= HIGH_RISK_SCORE)


def _high_risk_warning(ctx: RequestContext) -> ValidationIssue:
    score = ctx.vehicle.risk_score
    return ValidationIssue(
        code=HIGH_RISK_VEHICLE,
        message=f"This vehicle has a risk score of {score}/100. Consider additional verification.",
        metadata={"riskScore": score},
    )


def _fills_last_slot(ctx: RequestContext) -> bool:
    return ctx.active_count == ctx.policy.max_vehicles_per_unit - 1


def _approaching_limit_warning(ctx: RequestContext) -> ValidationIssue:
    nth = ctx.active_count + 1
    limit = ctx.policy.max_vehicles_per_unit
    return ValidationIssue(
        code=APPROACHING_VEHICLE_LIMIT,
        message=f"This will be the {nth}{ordinal_suffix(nth)} vehicle for this unit (limit: {limit}).",
        metadata={"currentCount": ctx.active_count, "maxAllowed": limit},
    )


# Order is part of the API contract.
ERROR_RULES: tuple[Rule, ...] = (
    (_is_blacklisted, _blacklisted_error),
    (_unit_is_full, _unit_full_error),
    (_exceeds_consecutive_hours, _consecutive_hours_error),
    (_in_cooldown, _cooldown_error),
    (_duration_not_offered, _duration_error),
    (_outside_operating_hours, _operating_hours_error),
)

WARNING_RULES: tuple[Rule, ...] = (
    (_is_long_duration, _long_duration_warning),
    (_has_violations, _violation_history_warning),
    (_is_high_risk, _high_risk_warning),
    (_fills_last_slot, _approaching_limit_warning),
)


def evaluate_rules(ctx: RequestContext) -> ValidationResult:
    """Run every rule against an already-fetched context. Pure."""
    return ValidationResult(
        errors=[make(ctx) for applies, make in ERROR_RULES if applies(ctx)],
        warnings=[make(ctx) for applies, make in WARNING_RULES if applies(ctx)],
    )


def emergency_override_result() -> ValidationResult:
    return ValidationResult(warnings=[ValidationIssue(
        code=EMERGENCY_OVERRIDE,
        message="Emergency pass - standard restrictions bypassed",
    )])


async def validate_pass_request(repo, request: PassRequest, now: Optional[datetime] = None,
                                default_policy: Policy = DEFAULT_POLICY) -> ValidationResult:
    """
    Validate a new pass request against the facility's policy.

    `repo` provides the read interfaces (see PassRepository). `now` is naive UTC;
    `default_policy` applies when the facility has no policy configured.
    Any exception raised while fetching or evaluating yields a single
    INTERNAL_ERROR and nothing else.
    """
    now = now or datetime.utcnow()
    try:
        policy, vehicle, active_count, recent_windows = await asyncio.gather(
            repo.fetch_policy(request.facility_id),
            repo.fetch_vehicle_by_plate(request.normalized_plate),
            repo.count_active_passes_for_unit(request.unit_id, now),
            repo.fetch_recent_pass_windows(request.normalized_plate, now),
        )
        if policy is None:
            logger.debug(f"No policy for facility {request.facility_id} — using defaults")
            policy = default_policy

        # Total bypass, blacklist included. Only when the facility allows overrides.
        if request.is_emergency and policy.allow_emergency_override:
            logger.info(
                f"[PASS] Emergency override | plate={request.normalized_plate} "
                f"unit={request.unit_id} facility={request.facility_id}"
            )
            return emergency_override_result()

        ctx = RequestContext(
            request=request,
            policy=policy,
            vehicle=vehicle,
            active_count=active_count,
            recent_windows=list(recent_windows),
            now=now,
            local_now=facility_local_time(now),
        )
        result = evaluate_rules(ctx)
    except Exception as e:
        logger.error(f"Pass validation error for plate {request.normalized_plate}: {e}", exc_info=True)
        return ValidationResult.internal_error()

    if result.has_error(BLACKLISTED):
        logger.warning(f"[PASS] Blacklisted plate refused: {request.normalized_plate}")
    logger.debug(
        f"[PASS] plate={request.normalized_plate} unit={request.unit_id} "
        f"valid={result.is_valid} errors={[e.code for e in result.errors]} "
        f"warnings={[w.code for w in result.warnings]}"
    )
    return result
