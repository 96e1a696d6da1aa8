# app/services/driver_compliance_service.py
"""
Driver qualification checks (49 CFR Part 391).

Check order is fixed and decides the primary violation:
active → medical cert → license → MVR → annual review → road test → open violations.
"""

from datetime import date
from typing import List, Optional

from app.schemas.compliance import (
    ComplianceViolation, DriverComplianceResult, Severity, ViolationType, summarize,
)
from app.services.compliance_repository import ComplianceRepository
from app.services.credential_rules import as_date, check_expiring_credential, check_recurring_credential
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _driver_not_found(driver_id: int) -> DriverComplianceResult:
    violation = ComplianceViolation(
        type=ViolationType.DRIVER_INACTIVE,
        severity=Severity.CRITICAL,
        message="Driver not found or not active",
    )
    return DriverComplianceResult(
        driver_id=driver_id,
        is_compliant=False,
        can_proceed=False,
        violations=[violation],
        warnings=[],
        allows_admin_override=False,
        primary_violation=violation,
    )


async def check_driver_compliance(repo: ComplianceRepository, driver_id: int,
                                  today: Optional[date] = None) -> DriverComplianceResult:
    today = today or date.today()
    driver = await repo.get_driver(driver_id)
    if not driver:
        logger.warning(f"[COMPLIANCE] Driver {driver_id} not found — blocking")
        return _driver_not_found(driver_id)

    violations: List[ComplianceViolation] = []
    warnings: List[ComplianceViolation] = []

    if not driver.is_active or driver.employment_status != "active":
        violations.append(ComplianceViolation(
            type=ViolationType.DRIVER_INACTIVE,
            severity=Severity.CRITICAL,
            message="Driver is not active",
        ))

    for violation, warning in (
        check_expiring_credential(
            as_date(driver.medical_cert_expiry), today,
            label="Medical certificate",
            missing_type=ViolationType.MEDICAL_CERT_MISSING,
            expired_type=ViolationType.MEDICAL_CERT_EXPIRED,
            regulation="49 CFR 391.41",
        ),
        check_expiring_credential(
            as_date(driver.license_expiry), today,
            label="Driver's license",
            missing_type=ViolationType.LICENSE_MISSING,
            expired_type=ViolationType.LICENSE_EXPIRED,
            regulation="49 CFR 391.11",
        ),
    ):
        if violation:
            violations.append(violation)
        if warning:
            warnings.append(warning)

    for violation in (
        check_recurring_credential(
            as_date(driver.mvr_check_date), today,
            missing_message="Motor Vehicle Record (MVR) check not on file",
            expired_message="MVR check expired (last check: {last})",
            missing_type=ViolationType.MVR_MISSING,
            expired_type=ViolationType.MVR_EXPIRED,
            regulation="49 CFR 391.25",
        ),
        check_recurring_credential(
            as_date(driver.annual_review_date), today,
            missing_message="Annual driver review not on file",
            expired_message="Annual review expired (last review: {last})",
            missing_type=ViolationType.ANNUAL_REVIEW_MISSING,
            expired_type=ViolationType.ANNUAL_REVIEW_EXPIRED,
            regulation="49 CFR 391.25",
        ),
    ):
        if violation:
            violations.append(violation)

    # Road test has no expiry — it only has to have happened
    if not driver.road_test_date:
        violations.append(ComplianceViolation(
            type=ViolationType.ROAD_TEST_MISSING,
            severity=Severity.CRITICAL,
            message="Road test certificate not on file",
            regulation="49 CFR 391.31",
        ))

    open_count = await repo.count_open_critical_violations("driver", driver_id)
    if open_count > 0:
        violations.append(ComplianceViolation(
            type=ViolationType.DRIVER_OPEN_VIOLATION,
            severity=Severity.CRITICAL,
            message=f"Driver has {open_count} unresolved critical violation(s)",
        ))

    result = DriverComplianceResult(
        driver_id=driver_id,
        driver_name=driver.name,
        violations=violations,
        warnings=warnings,
        **summarize(violations),
    )
    logger.info(
        f"[COMPLIANCE] Driver {driver_id}: can_proceed={result.can_proceed} "
        f"violations={len(violations)} warnings={len(warnings)}"
    )
    return result
