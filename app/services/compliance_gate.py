# app/services/compliance_gate.py
"""
Compliance gate for dispatch operations (assignment, clock-in, ...).

Runs the requested check, applies the override policy, writes the audit row
and either returns a decision to proceed or raises ComplianceBlockedError.

The gate fails closed: a check that raises, or an audit row that cannot be
written, propagates to the caller and the operation does not proceed.
"""

from datetime import date, datetime
from typing import Optional

from app.exceptions import ComplianceBlockedError
from app.schemas.audit_log import AuditContext
from app.schemas.compliance import CheckType
from app.schemas.compliance_check import (
    ComplianceDecisionOut, ComplianceEntities, OverrideRequest, RequestMeta,
)
from app.services.assignment_service import run_compliance_check
from app.services.audit_service import log_compliance_check
from app.services.compliance_repository import ComplianceRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)

OVERRIDE_INSTRUCTIONS = (
    'To override, include compliance_override: true and compliance_override_reason: "reason" '
    "in your request body. Note: Some violations cannot be overridden."
)


def _audit_context(entities: ComplianceEntities, meta: RequestMeta, tour_date: Optional[date],
                   override: Optional[OverrideRequest] = None) -> AuditContext:
    return AuditContext(
        driver_id=entities.driver_id,
        vehicle_id=entities.vehicle_id,
        booking_id=entities.booking_id,
        tour_date=tour_date,
        triggered_by=meta.triggered_by,
        request_ip=meta.request_ip,
        user_agent=meta.user_agent,
        was_overridden=override is not None,
        overridden_by=override.overridden_by if override else None,
        override_reason=override.reason if override else None,
    )


async def enforce_compliance(repo: ComplianceRepository, check_type: CheckType,
                             entities: ComplianceEntities, meta: RequestMeta,
                             override: Optional[OverrideRequest] = None,
                             allow_override: bool = True,
                             today: Optional[date] = None,
                             now: Optional[datetime] = None) -> ComplianceDecisionOut:
    result = await run_compliance_check(repo, check_type, entities, today=today, now=now)
    tour_date = entities.tour_date or (result.hos_compliance.tour_date
                                       if check_type in (CheckType.HOS, CheckType.CLOCK_IN) else None)

    if result.can_proceed:
        await log_compliance_check(repo, check_type.value, meta.endpoint, result,
                                   _audit_context(entities, meta, tour_date))
        if result.all_warnings:
            logger.info(f"[COMPLIANCE] {meta.endpoint} passed with {len(result.all_warnings)} warning(s)")
        return ComplianceDecisionOut(proceed=True, check_type=check_type, result=result)

    can_override = allow_override and result.allows_admin_override

    if override is not None and can_override:
        await log_compliance_check(repo, check_type.value, meta.endpoint, result,
                                   _audit_context(entities, meta, tour_date, override))
        logger.warning(
            f"[COMPLIANCE] OVERRIDE on {meta.endpoint} by user {override.overridden_by}: "
            f"{result.primary_violation.message}"
        )
        return ComplianceDecisionOut(proceed=True, was_overridden=True, check_type=check_type, result=result)

    if override is not None:
        logger.warning(f"[COMPLIANCE] Override refused on {meta.endpoint}: "
                       f"{result.primary_violation.message} is not overridable")

    await log_compliance_check(repo, check_type.value, meta.endpoint, result,
                               _audit_context(entities, meta, tour_date))
    logger.warning(f"[COMPLIANCE] BLOCKED {meta.endpoint}: {result.primary_violation.message}")
    raise ComplianceBlockedError(result, can_override=can_override, operation=meta.endpoint)
