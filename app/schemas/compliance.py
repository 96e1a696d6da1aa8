# app/schemas/compliance.py
"""
Compliance result types shared by the evaluators, the gate and the API.
Violation types and severities are closed enums so the non-overridable set
and severity checks cannot drift from the values the evaluators emit.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ViolationType(str, Enum):
    # Driver
    DRIVER_INACTIVE = "driver_inactive"
    MEDICAL_CERT_MISSING = "medical_cert_missing"
    MEDICAL_CERT_EXPIRED = "medical_cert_expired"
    LICENSE_MISSING = "license_missing"
    LICENSE_EXPIRED = "license_expired"
    MVR_MISSING = "mvr_missing"
    MVR_EXPIRED = "mvr_expired"
    ANNUAL_REVIEW_MISSING = "annual_review_missing"
    ANNUAL_REVIEW_EXPIRED = "annual_review_expired"
    ROAD_TEST_MISSING = "road_test_missing"
    DRIVER_OPEN_VIOLATION = "driver_open_violation"
    # Vehicle
    VEHICLE_INACTIVE = "vehicle_inactive"
    REGISTRATION_MISSING = "registration_missing"
    REGISTRATION_EXPIRED = "registration_expired"
    INSURANCE_MISSING = "insurance_missing"
    INSURANCE_EXPIRED = "insurance_expired"
    DOT_INSPECTION_MISSING = "dot_inspection_missing"
    DOT_INSPECTION_EXPIRED = "dot_inspection_expired"
    CRITICAL_DEFECT = "critical_defect"
    VEHICLE_OPEN_VIOLATION = "vehicle_open_violation"
    # Hours of Service
    HOS_DAILY_DRIVING_EXCEEDED = "hos_daily_driving_exceeded"
    HOS_DAILY_ON_DUTY_EXCEEDED = "hos_daily_on_duty_exceeded"
    HOS_WEEKLY_EXCEEDED = "hos_weekly_exceeded"


class Severity(str, Enum):
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    WARNING = "warning"


class CheckType(str, Enum):
    ASSIGNMENT = "assignment"   # driver + vehicle + HOS
    DRIVER = "driver"
    VEHICLE = "vehicle"
    HOS = "hos"
    CLOCK_IN = "clock_in"       # HOS check at clock-in


# Violations no admin may override
NON_OVERRIDABLE_VIOLATIONS = frozenset({
    ViolationType.MEDICAL_CERT_EXPIRED,
    ViolationType.LICENSE_EXPIRED,
    ViolationType.HOS_DAILY_DRIVING_EXCEEDED,
    ViolationType.HOS_DAILY_ON_DUTY_EXCEEDED,
    ViolationType.HOS_WEEKLY_EXCEEDED,
    ViolationType.CRITICAL_DEFECT,
    ViolationType.VEHICLE_INACTIVE,
    ViolationType.DRIVER_INACTIVE,
})


class ComplianceViolation(BaseModel):
    type: ViolationType
    severity: Severity
    message: str
    regulation: Optional[str] = None
    expiry_date: Optional[date] = None
    days_overdue: Optional[int] = None


class ComplianceCheckResult(BaseModel):
    is_compliant: bool
    can_proceed: bool
    violations: List[ComplianceViolation] = Field(default_factory=list)
    warnings: List[ComplianceViolation] = Field(default_factory=list)
    allows_admin_override: bool
    primary_violation: Optional[ComplianceViolation] = None

    @classmethod
    def passing(cls, **extra):
        """A result with nothing to report (used for checks that were not requested)."""
        return cls(is_compliant=True, can_proceed=True, violations=[], warnings=[],
                   allows_admin_override=True, **extra)


class DriverComplianceResult(ComplianceCheckResult):
    driver_id: int
    driver_name: Optional[str] = None


class VehicleComplianceResult(ComplianceCheckResult):
    vehicle_id: int
    vehicle_name: Optional[str] = None


class HOSComplianceResult(ComplianceCheckResult):
    driver_id: int
    tour_date: date
    driving_hours: float = 0.0
    on_duty_hours: float = 0.0
    weekly_hours: float = 0.0
    driving_hours_remaining: float = 0.0
    on_duty_hours_remaining: float = 0.0
    weekly_hours_remaining: float = 0.0


class AssignmentComplianceResult(BaseModel):
    can_proceed: bool
    driver_compliance: DriverComplianceResult
    vehicle_compliance: VehicleComplianceResult
    hos_compliance: HOSComplianceResult
    all_violations: List[ComplianceViolation] = Field(default_factory=list)
    all_warnings: List[ComplianceViolation] = Field(default_factory=list)
    primary_violation: Optional[ComplianceViolation] = None
    allows_admin_override: bool


def summarize(violations: List[ComplianceViolation]) -> dict:
    """Shared aggregation for driver and vehicle results."""
    can_proceed = not any(v.severity == Severity.CRITICAL for v in violations)
    overridable = not any(v.type in NON_OVERRIDABLE_VIOLATIONS for v in violations)
    return {
        "is_compliant": not violations,
        "can_proceed": can_proceed,
        "allows_admin_override": not can_proceed and overridable,
        "primary_violation": violations[0] if violations else None,
    }
