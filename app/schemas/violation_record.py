# app/schemas/violation_record.py
from pydantic import BaseModel
from datetime import date
from typing import Optional


class ViolationRecordOut(BaseModel):
    id: int
    entity_type: str
    entity_id: int
    violation_type: Optional[str]
    severity: str
    description: Optional[str]
    violation_date: Optional[date]
    resolved_date: Optional[date]
    resolution_notes: Optional[str]

    class Config:
        from_attributes = True


class ViolationResolve(BaseModel):
    resolution_notes: Optional[str] = None
