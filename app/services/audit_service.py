# app/services/audit_service.py
"""
Compliance audit trail.
Every gated compliance check and every admin override writes exactly one row.
A failed write raises ComplianceAuditError; callers must not let the gated
action proceed without its audit record.
"""

import json
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import ComplianceAuditError
from app.models.compliance_audit_log import ComplianceAuditLog
from app.schemas.audit_log import AuditContext
from app.schemas.compliance import AssignmentComplianceResult
from app.services.compliance_repository import ComplianceRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)


def build_audit_entry(action_type: str, endpoint: str, result: AssignmentComplianceResult,
                      context: AuditContext) -> ComplianceAuditLog:
    violations = [v.model_dump(mode="json", exclude_none=True) for v in result.all_violations]
    return ComplianceAuditLog(
        action_type=action_type,
        action_endpoint=endpoint,
        driver_id=context.driver_id,
        vehicle_id=context.vehicle_id,
        booking_id=context.booking_id,
        was_blocked=not result.can_proceed,
        block_reason=result.primary_violation.message if result.primary_violation else None,
        violations=json.dumps(violations),
        was_overridden=context.was_overridden,
        overridden_by=context.overridden_by,
        override_reason=context.override_reason,
        tour_date=context.tour_date,
        request_ip=context.request_ip,
        user_agent=context.user_agent,
        triggered_by=context.triggered_by,
        created_at=datetime.utcnow(),
    )


async def log_compliance_check(repo: ComplianceRepository, action_type: str, endpoint: str,
                               result: AssignmentComplianceResult, context: AuditContext) -> ComplianceAuditLog:
    entry = build_audit_entry(action_type, endpoint, result, context)
    try:
        await repo.add_audit_log(entry)
    except SQLAlchemyError as e:
        logger.error(
            f"[AUDIT] Failed to write compliance audit row action={action_type} endpoint={endpoint} "
            f"driver={context.driver_id} vehicle={context.vehicle_id} "
            f"blocked={entry.was_blocked} overridden={entry.was_overridden}: {e}",
            exc_info=True,
        )
        raise ComplianceAuditError(f"Compliance audit write failed for {endpoint}") from e

    if context.was_overridden:
        logger.warning(
            f"[AUDIT] Override recorded by user {context.overridden_by} on {endpoint}: "
            f"{entry.block_reason} — reason: {context.override_reason}"
        )
    else:
        logger.info(f"[AUDIT] {action_type} on {endpoint}: blocked={entry.was_blocked}")
    return entry
