# app/schemas/compliance_check.py
from pydantic import BaseModel
from datetime import date
from typing import List, Optional
from app.schemas.compliance import AssignmentComplianceResult, CheckType, ComplianceViolation


class ComplianceEntities(BaseModel):
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    tour_date: Optional[date] = None
    booking_id: Optional[int] = None


class OverrideRequest(BaseModel):
    reason: str
    overridden_by: Optional[int] = None


class ComplianceCheckRequest(ComplianceEntities):
    check_type: CheckType = CheckType.ASSIGNMENT
    compliance_override: bool = False
    compliance_override_reason: Optional[str] = None
    overridden_by: Optional[int] = None
    triggered_by: Optional[int] = None

    def override(self) -> Optional[OverrideRequest]:
        if not self.compliance_override or not self.compliance_override_reason:
            return None
        return OverrideRequest(reason=self.compliance_override_reason,
                               overridden_by=self.overridden_by)


class RequestMeta(BaseModel):
    endpoint: str
    request_ip: Optional[str] = None
    user_agent: Optional[str] = None
    triggered_by: Optional[int] = None


class ComplianceDecisionOut(BaseModel):
    proceed: bool
    was_overridden: bool = False
    check_type: CheckType
    result: AssignmentComplianceResult


class ComplianceBlockedDetail(BaseModel):
    code: str = "COMPLIANCE_BLOCKED"
    message: str
    operation: str
    violations: List[ComplianceViolation]
    warnings: List[ComplianceViolation]
    can_override: bool
    override_instructions: Optional[str] = None


class ComplianceBlockedOut(BaseModel):
    success: bool = False
    error: ComplianceBlockedDetail
