"""Known vehicles — lookup, register, blacklist, log violations."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.vehicle import (
    BlacklistUpdate, VehicleCreate, VehicleOut, ViolationCreate, ViolationLogged, ViolationOut,
)
from app.services.vehicle_service import (
    blacklist_vehicle, clear_blacklist, get_or_create_vehicle, lookup_vehicle_by_plate,
    record_violation,
)
from app.utils.license_plate import format_license_plate, normalize_license_plate, validate_license_plate

router = APIRouter()


def _checked_plate(plate: str) -> str:
    """Normalized path plate, or 422 if it would not pass PassCreate either."""
    ok, error = validate_license_plate(plate)
    if not ok:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error)
    return normalize_license_plate(plate)


@router.get("/vehicles/lookup/{plate}", summary="Look up a plate number")
def lookup_vehicle(plate: str, db: Session = Depends(get_db)):
    normalized = normalize_license_plate(plate)
    vehicle = lookup_vehicle_by_plate(db, normalized)
    result = {"plate": normalized, "display_plate": format_license_plate(plate)}
    if not vehicle:
        return {**result, "status": "unknown", "blacklisted": False}
    return {**result, "status": "known", "blacklisted": vehicle.is_blacklisted,
            "violation_count": vehicle.violation_count, "risk_score": vehicle.risk_score}


@router.post("/vehicles", response_model=VehicleOut, summary="Register a vehicle")
def register_vehicle(body: VehicleCreate, db: Session = Depends(get_db)):
    normalized = normalize_license_plate(body.license_plate)
    if lookup_vehicle_by_plate(db, normalized):
        raise HTTPException(status_code=400, detail=f"Plate {normalized} already registered")
    vehicle = get_or_create_vehicle(db, normalized, body.license_plate,
                                    make=body.make, model=body.model, color=body.color)
    db.commit()
    return vehicle


@router.put("/vehicles/{plate}/blacklist", response_model=VehicleOut, summary="Blacklist a vehicle")
def add_to_blacklist(plate: str, body: BlacklistUpdate, db: Session = Depends(get_db)):
    normalized = _checked_plate(plate)
    vehicle = get_or_create_vehicle(db, normalized, plate)
    return blacklist_vehicle(db, vehicle, body.reason, body.blacklisted_by)


@router.delete("/vehicles/{plate}/blacklist", response_model=VehicleOut, summary="Lift a blacklist")
def remove_from_blacklist(plate: str, db: Session = Depends(get_db)):
    vehicle = lookup_vehicle_by_plate(db, normalize_license_plate(plate))
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return clear_blacklist(db, vehicle)


@router.post("/vehicles/{plate}/violations", status_code=status.HTTP_201_CREATED,
             response_model=ViolationLogged, summary="Log a parking violation")
def log_violation(plate: str, body: ViolationCreate, db: Session = Depends(get_db)):
    """Unknown plates are registered on the spot. Later pass requests see the raised risk."""
    normalized = _checked_plate(plate)
    vehicle, violation = record_violation(
        db, normalized, plate, body.violation_type, body.severity,
        description=body.description, location=body.location,
        fine_amount=body.fine_amount, logged_by=body.logged_by,
    )
    return ViolationLogged(violation=ViolationOut.model_validate(violation),
                           vehicle=VehicleOut.model_validate(vehicle))
