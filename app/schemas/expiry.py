# app/schemas/expiry.py
from pydantic import BaseModel, Field
from datetime import date
from enum import Enum
from typing import List, Optional


class ExpiryBucket(str, Enum):
    EXPIRED = "expired"     # 0 days or less
    CRITICAL = "critical"   # 1-5 days
    URGENT = "urgent"       # 6-10 days
    WARNING = "warning"     # 11+ days, inside the notice window


class ExpiringCredential(BaseModel):
    entity_type: str        # driver | vehicle
    entity_id: int
    entity_name: str
    entity_email: Optional[str] = None
    field: str
    field_label: str
    expiry_date: date
    days_until_expiry: int
    bucket: ExpiryBucket


class ExpiryScanOut(BaseModel):
    as_of: date
    notice_days: int
    expired: List[ExpiringCredential] = Field(default_factory=list)
    critical: List[ExpiringCredential] = Field(default_factory=list)
    urgent: List[ExpiringCredential] = Field(default_factory=list)
    warning: List[ExpiringCredential] = Field(default_factory=list)
    all: List[ExpiringCredential] = Field(default_factory=list)
