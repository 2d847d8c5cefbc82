"""Visitor passes — validate, issue, extend, cancel, list."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.parking_pass import ParkingPass, PassStatus
from app.schemas.parking_pass import (
    PassCreate, PassCreated, PassExtend, PassExtended, PassOut, ValidationIssueOut,
    ValidationResultOut,
)
from app.services.extension_validation_service import validate_pass_extension
from app.services.pass_repository import PassRepository, get_pass_repository
from app.services.pass_service import apply_extension, cancel_pass, create_pass, get_pass
from app.services.pass_validation_service import PassRequest, validate_pass_request
from app.services.validation_types import INTERNAL_ERROR, NOT_FOUND, ValidationResult
from app.utils.license_plate import normalize_license_plate
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def status_code_for(result: ValidationResult) -> int:
    if result.is_valid:
        return status.HTTP_200_OK
    if result.has_error(INTERNAL_ERROR):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if result.has_error(NOT_FOUND):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def _rejection(result: ValidationResult, error: str) -> JSONResponse:
    body = ValidationResultOut.model_validate(result).model_dump()
    body["error"] = error
    return JSONResponse(status_code=status_code_for(result), content=jsonable_encoder(body))


def _warnings(result: ValidationResult) -> list[ValidationIssueOut]:
    return [ValidationIssueOut.model_validate(w) for w in result.warnings]


def _to_request(body: PassCreate) -> PassRequest:
    return PassRequest(
        facility_id=body.facility_id,
        normalized_plate=normalize_license_plate(body.license_plate),
        unit_id=body.unit_id,
        duration_hours=body.duration_hours,
        is_emergency=body.is_emergency,
    )


@router.post("/passes/validate", response_model=ValidationResultOut, summary="Dry-run pass validation")
async def validate_pass(body: PassCreate, repo: PassRepository = Depends(get_pass_repository)):
    """
    Runs every pass rule without issuing anything and returns the full result.
    Rule refusals are an answer, so they come back 200. An INTERNAL_ERROR is 500.
    """
    result = await validate_pass_request(repo, _to_request(body))
    if result.has_error(INTERNAL_ERROR):
        return _rejection(result, "Validation could not be completed")
    return ValidationResultOut.model_validate(result)


@router.post("/passes", status_code=status.HTTP_201_CREATED, response_model=PassCreated,
             summary="Request a visitor pass")
async def request_pass(body: PassCreate, db: Session = Depends(get_db),
                       repo: PassRepository = Depends(get_pass_repository)):
    request = _to_request(body)
    result = await validate_pass_request(repo, request)
    if not result.is_valid:
        logger.info(f"Pass refused for {request.normalized_plate}: {[e.code for e in result.errors]}")
        return _rejection(result, "Validation failed")

    parking_pass = create_pass(db, request, body.license_plate, visitor_name=body.visitor_name)
    return PassCreated(parking_pass=PassOut.model_validate(parking_pass), warnings=_warnings(result))


@router.post("/passes/extend", response_model=PassExtended, summary="Extend an existing pass")
async def extend_pass(body: PassExtend, db: Session = Depends(get_db),
                      repo: PassRepository = Depends(get_pass_repository)):
    result = await validate_pass_extension(repo, body.pass_id, body.additional_hours)
    if not result.is_valid:
        return _rejection(result, "Extension validation failed")

    parking_pass = get_pass(db, body.pass_id)
    if not parking_pass:
        raise HTTPException(status_code=404, detail="Pass not found")
    previous_end, new_end = apply_extension(db, parking_pass, body.additional_hours)
    return PassExtended(
        parking_pass=PassOut.model_validate(parking_pass),
        previous_end_time=previous_end,
        new_end_time=new_end,
        warnings=_warnings(result),
    )


@router.get("/passes", response_model=list[PassOut], summary="List passes, newest first")
def list_passes(pass_status: Optional[PassStatus] = None, facility_id: Optional[str] = None,
                plate: Optional[str] = None, limit: int = 50, db: Session = Depends(get_db)):
    q = db.query(ParkingPass).filter(ParkingPass.deleted_at.is_(None))
    if pass_status:
        q = q.filter(ParkingPass.status == pass_status)
    if facility_id:
        q = q.filter(ParkingPass.facility_id == facility_id)
    if plate:
        q = q.filter(ParkingPass.plate_number == normalize_license_plate(plate))
    return q.order_by(ParkingPass.created_at.desc()).limit(limit).all()


@router.get("/passes/{pass_id}", response_model=PassOut)
def read_pass(pass_id: int, db: Session = Depends(get_db)):
    parking_pass = get_pass(db, pass_id)
    if not parking_pass:
        raise HTTPException(status_code=404, detail="Pass not found")
    return parking_pass


@router.post("/passes/{pass_id}/cancel", response_model=PassOut, summary="Cancel a pass")
def cancel(pass_id: int, db: Session = Depends(get_db)):
    parking_pass = get_pass(db, pass_id)
    if not parking_pass:
        raise HTTPException(status_code=404, detail="Pass not found")
    if parking_pass.status == PassStatus.CANCELLED:
        return parking_pass
    return cancel_pass(db, parking_pass)
