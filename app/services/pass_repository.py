# app/services/pass_repository.py
"""
Read side of the pass rule engines.

Every fetch is a coroutine that opens its own short-lived session and runs the
blocking SQLAlchemy query in a worker thread, so callers can gather several
fetches and have them genuinely overlap. Rows come back as frozen snapshots
(app/services/validation_types.py); the engines never see ORM objects.

No retries and no timeouts here: a failing query raises, and the engine turns
that into a single INTERNAL_ERROR.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.models.parking_pass import ParkingPass, PassStatus
from app.models.parking_policy import ParkingPolicy
from app.models.vehicle import Vehicle
from app.services.validation_types import Authorization, PassWindow, Policy, VehicleRecord


def policy_from_row(row: ParkingPolicy) -> Policy:
    return Policy(
        max_vehicles_per_unit=row.max_vehicles_per_unit,
        max_consecutive_hours=row.max_consecutive_hours,
        cooldown_hours=row.cooldown_hours,
        max_extensions=row.max_extensions,
        extension_max_hours=row.extension_max_hours,
        allowed_durations=tuple(row.allowed_durations or ()),
        grace_period_minutes=row.grace_period_minutes,
        allow_emergency_override=bool(row.allow_emergency_override),
        operating_start_hour=row.operating_start_hour,
        operating_end_hour=row.operating_end_hour,
    )


def vehicle_from_row(row: Vehicle) -> VehicleRecord:
    return VehicleRecord(
        normalized_plate=row.normalized_plate,
        is_blacklisted=bool(row.is_blacklisted),
        blacklist_reason=row.blacklist_reason,
        blacklisted_at=row.blacklisted_at,
        blacklisted_by=row.blacklisted_by,
        violation_count=row.violation_count or 0,
        risk_score=row.risk_score or 0,
    )


def authorization_from_row(row: ParkingPass) -> Authorization:
    return Authorization(
        id=row.id,
        status=PassStatus(row.status),
        end_time=row.end_time,
        extension_count=row.extension_count or 0,
        facility_id=row.facility_id,
    )


class PassRepository:
    """SQLAlchemy-backed implementation of the engines' five fetch interfaces."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    async def _run(self, query: Callable[[Session], object]):
        def work():
            db = self._session_factory()
            try:
                return query(db)
            finally:
                db.close()

        return await asyncio.to_thread(work)

    async def fetch_policy(self, facility_id: str) -> Optional[Policy]:
        def query(db: Session):
            row = db.query(ParkingPolicy).filter(ParkingPolicy.facility_id == facility_id).first()
            return policy_from_row(row) if row else None

        return await self._run(query)

    async def fetch_vehicle_by_plate(self, normalized_plate: str) -> Optional[VehicleRecord]:
        def query(db: Session):
            row = db.query(Vehicle).filter(Vehicle.normalized_plate == normalized_plate).first()
            return vehicle_from_row(row) if row else None

        return await self._run(query)

    async def count_active_passes_for_unit(self, unit_id: str, now: datetime) -> int:
        def query(db: Session):
            return db.query(ParkingPass).filter(
                ParkingPass.unit_id == unit_id,
                ParkingPass.status == PassStatus.ACTIVE,
                ParkingPass.end_time > now,
                ParkingPass.deleted_at.is_(None),
            ).count()

        return await self._run(query)

    async def fetch_recent_pass_windows(self, normalized_plate: str, now: datetime,
                                        lookback_hours: Optional[int] = None) -> list[PassWindow]:
        """Passes created within the lookback, most recent end_time first."""
        since = now - timedelta(hours=lookback_hours or settings.RECENT_PASS_LOOKBACK_HOURS)

        def query(db: Session):
            rows = (
                db.query(ParkingPass)
                .filter(
                    ParkingPass.plate_number == normalized_plate,
                    ParkingPass.created_at >= since,
                    ParkingPass.deleted_at.is_(None),
                )
                .order_by(ParkingPass.end_time.desc())
                .all()
            )
            return [PassWindow(start_time=r.start_time, end_time=r.end_time, duration=r.duration)
                    for r in rows]

        return await self._run(query)

    async def fetch_authorization_with_policy(
        self, authorization_id: int
    ) -> Optional[Tuple[Authorization, Optional[Policy]]]:
        """None if the pass does not exist. Policy is None when the facility has none configured."""
        def query(db: Session):
            row = db.query(ParkingPass).filter(
                ParkingPass.id == authorization_id,
                ParkingPass.deleted_at.is_(None),
            ).first()
            if not row:
                return None
            policy_row = db.query(ParkingPolicy).filter(
                ParkingPolicy.facility_id == row.facility_id
            ).first()
            return authorization_from_row(row), (policy_from_row(policy_row) if policy_row else None)

        return await self._run(query)


def get_pass_repository() -> PassRepository:
    """FastAPI dependency — overridable in tests."""
    return PassRepository()
