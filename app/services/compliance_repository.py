# app/services/compliance_repository.py
"""
Entity readers for compliance decisions.

ComplianceRepository wraps one SQLAlchemy session and is the only place the
compliance services touch the database. Evaluators receive it as a parameter,
so tests substitute an AsyncMock instead of patching modules.

Read failures (SQLAlchemyError) are not caught here: a check that cannot read
its records must fail, never report "compliant".
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.compliance_audit_log import ComplianceAuditLog
from app.models.compliance_violation import ComplianceViolationRecord
from app.models.driver import Driver
from app.models.inspection import Inspection
from app.models.time_card import TimeCard
from app.models.vehicle import Vehicle


class ComplianceRepository:
    def __init__(self, db: Session):
        self.db = db

    # ── Entity lookups ────────────────────────────────────────────────────
    async def get_driver(self, driver_id: int) -> Optional[Driver]:
        return self.db.query(Driver).filter(
            Driver.id == driver_id, Driver.role == "driver"
        ).first()

    async def get_vehicle(self, vehicle_id: int) -> Optional[Vehicle]:
        return self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    async def count_open_critical_violations(self, entity_type: str, entity_id: int) -> int:
        count = self.db.query(func.count(ComplianceViolationRecord.id)).filter(
            ComplianceViolationRecord.entity_type == entity_type,
            ComplianceViolationRecord.entity_id == entity_id,
            ComplianceViolationRecord.resolved_date == None,  # noqa: E711
            ComplianceViolationRecord.severity == "critical",
        ).scalar()
        return count or 0

    async def get_latest_defect_inspection(self, vehicle_id: int) -> Optional[Inspection]:
        """Most recent inspection of this vehicle that found defects."""
        return (
            self.db.query(Inspection)
            .filter(Inspection.vehicle_id == vehicle_id, Inspection.defects_found == True)  # noqa: E712
            .order_by(Inspection.created_at.desc())
            .first()
        )

    async def get_time_cards(self, driver_id: int, start_date: date, end_date: date) -> List[TimeCard]:
        """Time cards whose clock-in falls on a day in [start_date, end_date]."""
        window_start = datetime.combine(start_date, time.min)
        window_end = datetime.combine(end_date + timedelta(days=1), time.min)
        return (
            self.db.query(TimeCard)
            .filter(
                TimeCard.driver_id == driver_id,
                TimeCard.clock_in_time >= window_start,
                TimeCard.clock_in_time < window_end,
            )
            .order_by(TimeCard.clock_in_time)
            .all()
        )

    # ── Expiry scan ───────────────────────────────────────────────────────
    async def get_drivers_expiring_by(self, cutoff: date) -> List[Driver]:
        return self.db.query(Driver).filter(
            Driver.role == "driver",
            Driver.is_active == True,  # noqa: E712
            (Driver.license_expiry <= cutoff) | (Driver.medical_cert_expiry <= cutoff),
        ).all()

    async def get_vehicles_expiring_by(self, cutoff: date) -> List[Vehicle]:
        return self.db.query(Vehicle).filter(
            Vehicle.is_active == True,  # noqa: E712
            (Vehicle.insurance_expiry <= cutoff) | (Vehicle.registration_expiry <= cutoff),
        ).all()

    # ── Recorded violations ───────────────────────────────────────────────
    async def list_violations(self, entity_type: Optional[str] = None, entity_id: Optional[int] = None,
                              open_only: bool = True, limit: int = 50) -> List[ComplianceViolationRecord]:
        q = self.db.query(ComplianceViolationRecord)
        if entity_type:
            q = q.filter(ComplianceViolationRecord.entity_type == entity_type)
        if entity_id is not None:
            q = q.filter(ComplianceViolationRecord.entity_id == entity_id)
        if open_only:
            q = q.filter(ComplianceViolationRecord.resolved_date == None)  # noqa: E711
        return q.order_by(ComplianceViolationRecord.id.desc()).limit(limit).all()

    async def resolve_violation(self, violation_id: int, resolved_on: date,
                                notes: Optional[str] = None) -> Optional[ComplianceViolationRecord]:
        record = self.db.query(ComplianceViolationRecord).filter(
            ComplianceViolationRecord.id == violation_id
        ).first()
        if not record:
            return None
        try:
            record.resolved_date = resolved_on
            record.resolution_notes = notes
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return record

    # ── Audit trail ───────────────────────────────────────────────────────
    async def add_audit_log(self, entry: ComplianceAuditLog) -> ComplianceAuditLog:
        """Insert one audit row and commit immediately."""
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return entry

    async def list_audit_log(self, driver_id: Optional[int] = None, vehicle_id: Optional[int] = None,
                             was_blocked: Optional[bool] = None, limit: int = 50) -> List[ComplianceAuditLog]:
        q = self.db.query(ComplianceAuditLog)
        if driver_id is not None:
            q = q.filter(ComplianceAuditLog.driver_id == driver_id)
        if vehicle_id is not None:
            q = q.filter(ComplianceAuditLog.vehicle_id == vehicle_id)
        if was_blocked is not None:
            q = q.filter(ComplianceAuditLog.was_blocked == was_blocked)
        return q.order_by(ComplianceAuditLog.created_at.desc()).limit(limit).all()
