# app/services/pass_service.py
"""
Pass lifecycle writes — the caller side of the rule engines.

The engines only advise. These helpers perform the mutation once a result
comes back valid: issuing a pass, applying an extension, cancelling.
Two concurrent requests for the same unit can both pass validation; nothing
here serialises them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session
from app.models.parking_pass import ParkingPass, PassStatus
from app.services.pass_validation_service import PassRequest
from app.services.vehicle_service import get_or_create_vehicle
from app.utils.date_time import calculate_end_time, extend_end_time, format_duration
from app.utils.license_plate import mask_license_plate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_pass(db: Session, pass_id: int) -> Optional[ParkingPass]:
    return db.query(ParkingPass).filter(
        ParkingPass.id == pass_id,
        ParkingPass.deleted_at.is_(None),
    ).first()


def create_pass(db: Session, request: PassRequest, license_plate: str,
                now: Optional[datetime] = None, visitor_name: Optional[str] = None) -> ParkingPass:
    """Issue an ACTIVE pass starting now. Call only after a valid result."""
    now = now or datetime.utcnow()
    vehicle = get_or_create_vehicle(db, request.normalized_plate, license_plate)

    parking_pass = ParkingPass(
        facility_id=request.facility_id,
        unit_id=request.unit_id,
        plate_number=request.normalized_plate,
        vehicle_id=vehicle.id,
        visitor_name=visitor_name,
        start_time=now,
        end_time=calculate_end_time(now, request.duration_hours),
        duration=request.duration_hours,
        status=PassStatus.ACTIVE,
        is_emergency=1 if request.is_emergency else 0,
        extension_count=0,
        created_at=now,
    )
    db.add(parking_pass)
    db.commit()
    logger.info(
        f"[PASS] Issued pass {parking_pass.id} | plate={mask_license_plate(request.normalized_plate)} "
        f"unit={request.unit_id} for {format_duration(request.duration_hours)} until {parking_pass.end_time}"
    )
    return parking_pass


def apply_extension(db: Session, parking_pass: ParkingPass, additional_hours: int,
                    now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Extend a pass. Call only after a valid extension result. Returns (previous_end, new_end)."""
    now = now or datetime.utcnow()
    previous_end = parking_pass.end_time
    new_end = extend_end_time(previous_end, additional_hours)

    parking_pass.end_time = new_end
    parking_pass.extension_count = (parking_pass.extension_count or 0) + 1
    parking_pass.last_extended_at = now
    parking_pass.status = PassStatus.EXTENDED
    db.commit()
    logger.info(f"[EXTEND] Pass {parking_pass.id}: {previous_end} → {new_end} (+{format_duration(additional_hours)})")
    return previous_end, new_end


def cancel_pass(db: Session, parking_pass: ParkingPass) -> ParkingPass:
    parking_pass.status = PassStatus.CANCELLED
    db.commit()
    logger.info(f"[PASS] Pass {parking_pass.id} cancelled")
    return parking_pass
