# app/routers/compliance.py
"""
Compliance endpoints.
POST /compliance/check            — gated check for a dispatch operation (audited, 403 when blocked)
GET  /compliance/drivers/{id}     — driver qualification status
GET  /compliance/vehicles/{id}    — vehicle roadworthiness status
GET  /compliance/drivers/{id}/hos — hours-of-service status for a date
GET  /compliance/audit-log        — audit trail
GET  /compliance/violations       — recorded violations, PUT .../resolve to close one
GET  /compliance/expirations      — credentials expiring inside the notice window
"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.audit_log import ComplianceAuditLogOut
from app.schemas.compliance import DriverComplianceResult, HOSComplianceResult, VehicleComplianceResult
from app.schemas.compliance_check import ComplianceCheckRequest, ComplianceDecisionOut, RequestMeta
from app.schemas.expiry import ExpiryScanOut
from app.schemas.violation_record import ViolationRecordOut, ViolationResolve
from app.services.compliance_gate import enforce_compliance
from app.services.compliance_repository import ComplianceRepository
from app.services.driver_compliance_service import check_driver_compliance
from app.services.expiry_service import scan_expiring_credentials
from app.services.hos_service import check_hos_compliance
from app.services.vehicle_compliance_service import check_vehicle_compliance

router = APIRouter()


def get_repository(db: Session = Depends(get_db)) -> ComplianceRepository:
    """FastAPI dependency — one repository per request session."""
    return ComplianceRepository(db)


def get_now() -> datetime:
    """
    FastAPI dependency — the instant open time-card segments run until.
    Local naive time, the same convention time-card clock-ins are stored in.
    """
    return datetime.now()


def get_today(now: datetime = Depends(get_now)) -> date:
    """FastAPI dependency — the date credential expiries are compared against. Derived from get_now."""
    return now.date()


@router.post("/compliance/check", response_model=ComplianceDecisionOut,
             summary="Gated compliance check for a dispatch operation")
async def check_compliance(body: ComplianceCheckRequest, request: Request,
                           repo: ComplianceRepository = Depends(get_repository),
                           today: date = Depends(get_today), now: datetime = Depends(get_now)):
    """
    Runs the requested check and records it in the audit log.
    Returns 403 COMPLIANCE_BLOCKED when the operation may not proceed.
    Send compliance_override + compliance_override_reason to override an overridable block.
    """
    meta = RequestMeta(
        endpoint=request.url.path,
        request_ip=request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
        or (request.client.host if request.client else None),
        user_agent=request.headers.get("user-agent"),
        triggered_by=body.triggered_by,
    )
    return await enforce_compliance(repo, body.check_type, body, meta, override=body.override(),
                                    today=today, now=now)


@router.get("/compliance/drivers/{driver_id}", response_model=DriverComplianceResult,
            summary="Driver qualification status")
async def get_driver_compliance(driver_id: int, repo: ComplianceRepository = Depends(get_repository),
                                today: date = Depends(get_today)):
    return await check_driver_compliance(repo, driver_id, today=today)


@router.get("/compliance/vehicles/{vehicle_id}", response_model=VehicleComplianceResult,
            summary="Vehicle roadworthiness status")
async def get_vehicle_compliance(vehicle_id: int, repo: ComplianceRepository = Depends(get_repository),
                                 today: date = Depends(get_today)):
    return await check_vehicle_compliance(repo, vehicle_id, today=today)


@router.get("/compliance/drivers/{driver_id}/hos", response_model=HOSComplianceResult,
            summary="Hours-of-service status")
async def get_hos_compliance(driver_id: int, tour_date: Optional[date] = None,
                             repo: ComplianceRepository = Depends(get_repository),
                             today: date = Depends(get_today), now: datetime = Depends(get_now)):
    """Hours used and remaining for tour_date (defaults to today)."""
    return await check_hos_compliance(repo, driver_id, tour_date or today, now=now)


@router.get("/compliance/audit-log", response_model=list[ComplianceAuditLogOut],
            summary="Compliance audit trail")
async def get_audit_log(driver_id: Optional[int] = None, vehicle_id: Optional[int] = None,
                        was_blocked: Optional[bool] = None, limit: int = 50,
                        repo: ComplianceRepository = Depends(get_repository)):
    """Newest first. Filter by driver, vehicle or blocked/passed."""
    return await repo.list_audit_log(driver_id=driver_id, vehicle_id=vehicle_id,
                                     was_blocked=was_blocked, limit=limit)


@router.get("/compliance/violations", response_model=list[ViolationRecordOut],
            summary="Recorded compliance violations")
async def get_violations(entity_type: Optional[str] = None, entity_id: Optional[int] = None,
                         open_only: bool = True, limit: int = 50,
                         repo: ComplianceRepository = Depends(get_repository)):
    return await repo.list_violations(entity_type=entity_type, entity_id=entity_id,
                                      open_only=open_only, limit=limit)


@router.put("/compliance/violations/{violation_id}/resolve", summary="Resolve a recorded violation")
async def resolve_violation(violation_id: int, body: ViolationResolve,
                            repo: ComplianceRepository = Depends(get_repository),
                            today: date = Depends(get_today)):
    """Mark a violation as resolved. Resolved critical violations stop blocking dispatch."""
    record = await repo.resolve_violation(violation_id, today, body.resolution_notes)
    if not record:
        raise HTTPException(status_code=404, detail="Violation not found")
    return {"id": violation_id, "status": "resolved", "resolved_date": str(record.resolved_date)}


@router.get("/compliance/expirations", response_model=ExpiryScanOut,
            summary="Credentials expiring inside the notice window")
async def get_expirations(notice_days: Optional[int] = None,
                          repo: ComplianceRepository = Depends(get_repository),
                          today: date = Depends(get_today)):
    return await scan_expiring_credentials(repo, today=today, notice_days=notice_days)
