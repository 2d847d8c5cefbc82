# app/services/vehicle_service.py
"""
Vehicle lookup, blacklist management and violation logging.
Used by pass_service and the vehicles router.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from app.models.vehicle import Vehicle
from app.models.violation import Violation, ViolationSeverity
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Risk score added per logged violation, by severity
RISK_INCREMENTS = {
    ViolationSeverity.LOW: 5,
    ViolationSeverity.MEDIUM: 10,
    ViolationSeverity.HIGH: 15,
    ViolationSeverity.CRITICAL: 25,
}
MAX_RISK_SCORE = 100


def lookup_vehicle_by_plate(db: Session, normalized_plate: str) -> Optional[Vehicle]:
    """Find a vehicle by normalized plate. Returns None if never seen."""
    return db.query(Vehicle).filter(Vehicle.normalized_plate == normalized_plate).first()


def get_or_create_vehicle(db: Session, normalized_plate: str, license_plate: str, **details) -> Vehicle:
    """Returns the existing vehicle or adds (without committing) a new clean one."""
    vehicle = lookup_vehicle_by_plate(db, normalized_plate)
    if vehicle:
        return vehicle

    vehicle = Vehicle(
        normalized_plate=normalized_plate,
        license_plate=license_plate,
        is_blacklisted=False,
        violation_count=0,
        risk_score=0,
        created_at=datetime.utcnow(),
        **details,
    )
    db.add(vehicle)
    db.flush()
    logger.info(f"[VEHICLE] New vehicle {normalized_plate}")
    return vehicle


def blacklist_vehicle(db: Session, vehicle: Vehicle, reason: Optional[str], blacklisted_by: str) -> Vehicle:
    vehicle.is_blacklisted = True
    vehicle.blacklist_reason = reason
    vehicle.blacklisted_at = datetime.utcnow()
    vehicle.blacklisted_by = blacklisted_by
    db.commit()
    logger.warning(f"[VEHICLE] {vehicle.normalized_plate} blacklisted by {blacklisted_by}: {reason}")
    return vehicle


def clear_blacklist(db: Session, vehicle: Vehicle) -> Vehicle:
    vehicle.is_blacklisted = False
    vehicle.blacklist_reason = None
    vehicle.blacklisted_at = None
    vehicle.blacklisted_by = None
    db.commit()
    logger.info(f"[VEHICLE] {vehicle.normalized_plate} removed from blacklist")
    return vehicle


def record_violation(db: Session, normalized_plate: str, license_plate: str, violation_type: str,
                     severity: ViolationSeverity = ViolationSeverity.MEDIUM,
                     now: Optional[datetime] = None, **details) -> tuple[Vehicle, Violation]:
    """
    Log a violation against a plate, registering the vehicle if it is new.
    Bumps violation_count by one and risk_score by the severity increment (capped at 100).
    Returns (vehicle, violation).
    """
    now = now or datetime.utcnow()
    vehicle = get_or_create_vehicle(db, normalized_plate, license_plate)

    violation = Violation(
        vehicle_id=vehicle.id,
        violation_type=violation_type,
        severity=severity,
        created_at=now,
        **details,
    )
    db.add(violation)

    vehicle.violation_count = (vehicle.violation_count or 0) + 1
    vehicle.risk_score = min(MAX_RISK_SCORE, (vehicle.risk_score or 0) + RISK_INCREMENTS[severity])
    db.commit()
    logger.warning(
        f"[VIOLATION] {violation_type} ({severity.value}) for {normalized_plate} | "
        f"count={vehicle.violation_count} risk={vehicle.risk_score}"
    )
    return vehicle, violation
