# app/schemas/audit_log.py
from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional


class AuditContext(BaseModel):
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    booking_id: Optional[int] = None
    tour_date: Optional[date] = None
    triggered_by: Optional[int] = None
    request_ip: Optional[str] = None
    user_agent: Optional[str] = None
    was_overridden: bool = False
    overridden_by: Optional[int] = None
    override_reason: Optional[str] = None


class ComplianceAuditLogOut(BaseModel):
    id: int
    action_type: str
    action_endpoint: Optional[str]
    driver_id: Optional[int]
    vehicle_id: Optional[int]
    booking_id: Optional[int]
    was_blocked: bool
    block_reason: Optional[str]
    violations: Optional[str]
    was_overridden: bool
    overridden_by: Optional[int]
    override_reason: Optional[str]
    tour_date: Optional[date]
    triggered_by: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True
