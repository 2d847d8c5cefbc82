"""Per-facility parking policy — read (with defaults) and replace."""

from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.parking_policy import ParkingPolicy
from app.schemas.parking_policy import PolicyOut, PolicyUpdate
from app.services.policy_defaults import DEFAULT_POLICY
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/policies/{facility_id}", response_model=PolicyOut)
def get_policy(facility_id: str, db: Session = Depends(get_db)):
    """Configured policy, or the fallback defaults flagged with is_default=true."""
    row = db.query(ParkingPolicy).filter(ParkingPolicy.facility_id == facility_id).first()
    if not row:
        defaults = asdict(DEFAULT_POLICY)
        defaults["allowed_durations"] = list(DEFAULT_POLICY.allowed_durations)
        return PolicyOut(facility_id=facility_id, is_default=True, **defaults)
    return PolicyOut.model_validate(row)


@router.put("/policies/{facility_id}", response_model=PolicyOut, summary="Create or replace a facility policy")
def put_policy(facility_id: str, body: PolicyUpdate, db: Session = Depends(get_db)):
    row = db.query(ParkingPolicy).filter(ParkingPolicy.facility_id == facility_id).first()
    now = datetime.utcnow()
    if not row:
        row = ParkingPolicy(facility_id=facility_id, created_at=now)
        db.add(row)
    for name, value in body.model_dump().items():
        setattr(row, name, value)
    row.updated_at = now
    db.commit()
    logger.info(f"[POLICY] {facility_id} updated: {body.model_dump()}")
    return PolicyOut.model_validate(row)
