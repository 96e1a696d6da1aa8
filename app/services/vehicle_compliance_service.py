# app/services/vehicle_compliance_service.py
"""
Vehicle roadworthiness checks: registration, insurance (49 CFR 387.33),
annual DOT inspection (49 CFR 396.17), critical defects (49 CFR 396.11)
and open critical violations.
"""

from datetime import date
from typing import List, Optional

from app.schemas.compliance import (
    ComplianceViolation, Severity, VehicleComplianceResult, ViolationType, summarize,
)
from app.services.compliance_repository import ComplianceRepository
from app.services.credential_rules import as_date, check_expiring_credential, check_recurring_credential
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _vehicle_not_found(vehicle_id: int) -> VehicleComplianceResult:
    violation = ComplianceViolation(
        type=ViolationType.VEHICLE_INACTIVE,
        severity=Severity.CRITICAL,
        message="Vehicle not found",
    )
    return VehicleComplianceResult(
        vehicle_id=vehicle_id,
        is_compliant=False,
        can_proceed=False,
        violations=[violation],
        warnings=[],
        allows_admin_override=False,
        primary_violation=violation,
    )


async def check_vehicle_compliance(repo: ComplianceRepository, vehicle_id: int,
                                   today: Optional[date] = None) -> VehicleComplianceResult:
    today = today or date.today()
    vehicle = await repo.get_vehicle(vehicle_id)
    if not vehicle:
        logger.warning(f"[COMPLIANCE] Vehicle {vehicle_id} not found — blocking")
        return _vehicle_not_found(vehicle_id)

    violations: List[ComplianceViolation] = []
    warnings: List[ComplianceViolation] = []

    if not vehicle.is_active:
        violations.append(ComplianceViolation(
            type=ViolationType.VEHICLE_INACTIVE,
            severity=Severity.CRITICAL,
            message="Vehicle is marked as inactive",
        ))

    for violation, warning in (
        check_expiring_credential(
            as_date(vehicle.registration_expiry), today,
            label="Vehicle registration",
            missing_type=ViolationType.REGISTRATION_MISSING,
            expired_type=ViolationType.REGISTRATION_EXPIRED,
        ),
        check_expiring_credential(
            as_date(vehicle.insurance_expiry), today,
            label="Vehicle insurance",
            missing_type=ViolationType.INSURANCE_MISSING,
            expired_type=ViolationType.INSURANCE_EXPIRED,
            regulation="49 CFR 387.33",
        ),
    ):
        if violation:
            violations.append(violation)
        if warning:
            warnings.append(warning)

    inspection_violation = check_recurring_credential(
        as_date(vehicle.last_dot_inspection), today,
        missing_message="No DOT inspection on file",
        expired_message="DOT inspection expired (last: {last})",
        missing_type=ViolationType.DOT_INSPECTION_MISSING,
        expired_type=ViolationType.DOT_INSPECTION_EXPIRED,
        regulation="49 CFR 396.17",
        severity=Severity.CRITICAL,
    )
    if inspection_violation:
        violations.append(inspection_violation)

    latest_defect = await repo.get_latest_defect_inspection(vehicle_id)
    if latest_defect and latest_defect.defect_severity == "critical":
        violations.append(ComplianceViolation(
            type=ViolationType.CRITICAL_DEFECT,
            severity=Severity.CRITICAL,
            message="Vehicle has unresolved critical defects from most recent inspection",
            regulation="49 CFR 396.11",
        ))

    open_count = await repo.count_open_critical_violations("vehicle", vehicle_id)
    if open_count > 0:
        violations.append(ComplianceViolation(
            type=ViolationType.VEHICLE_OPEN_VIOLATION,
            severity=Severity.CRITICAL,
            message=f"Vehicle has {open_count} unresolved critical violation(s)",
        ))

    result = VehicleComplianceResult(
        vehicle_id=vehicle_id,
        vehicle_name=vehicle.name,
        violations=violations,
        warnings=warnings,
        **summarize(violations),
    )
    logger.info(
        f"[COMPLIANCE] Vehicle {vehicle_id}: can_proceed={result.can_proceed} "
        f"violations={len(violations)} warnings={len(warnings)}"
    )
    return result
