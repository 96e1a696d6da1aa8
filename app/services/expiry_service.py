# app/services/expiry_service.py
"""
Expiring-credential scan.
Lists driver license / medical certificate and vehicle insurance / registration
expiries inside the notice window, bucketed for staff follow-up:

  expired   ≤ 0 days
  critical  1-5 days
  urgent    6-10 days
  warning   11 days up to the notice window (EXPIRY_NOTICE_DAYS)
"""

from datetime import date, timedelta
from typing import List, Optional

from app.config import settings
from app.schemas.expiry import ExpiringCredential, ExpiryBucket, ExpiryScanOut
from app.services.compliance_repository import ComplianceRepository
from app.services.credential_rules import as_date
from app.utils.logger import get_logger

logger = get_logger(__name__)

DRIVER_FIELDS = (("license_expiry", "Driver License"), ("medical_cert_expiry", "Medical Certificate"))
VEHICLE_FIELDS = (("insurance_expiry", "Insurance"), ("registration_expiry", "Registration"))

BUCKET_ORDER = {ExpiryBucket.EXPIRED: 0, ExpiryBucket.CRITICAL: 1, ExpiryBucket.URGENT: 2, ExpiryBucket.WARNING: 3}


def bucket_for(days_until: int) -> ExpiryBucket:
    if days_until <= 0:
        return ExpiryBucket.EXPIRED
    if days_until <= 5:
        return ExpiryBucket.CRITICAL
    if days_until <= 10:
        return ExpiryBucket.URGENT
    return ExpiryBucket.WARNING


def _collect(entity, entity_type: str, fields, today: date, notice_days: int) -> List[ExpiringCredential]:
    items = []
    for field, label in fields:
        expiry = as_date(getattr(entity, field))
        if expiry is None:
            continue
        days_until = (expiry - today).days
        if days_until > notice_days:
            continue
        items.append(ExpiringCredential(
            entity_type=entity_type,
            entity_id=entity.id,
            entity_name=entity.name,
            entity_email=getattr(entity, "email", None),
            field=field,
            field_label=label,
            expiry_date=expiry,
            days_until_expiry=days_until,
            bucket=bucket_for(days_until),
        ))
    return items


async def scan_expiring_credentials(repo: ComplianceRepository, today: Optional[date] = None,
                                    notice_days: Optional[int] = None) -> ExpiryScanOut:
    today = today or date.today()
    notice_days = settings.EXPIRY_NOTICE_DAYS if notice_days is None else notice_days
    cutoff = today + timedelta(days=notice_days)

    items: List[ExpiringCredential] = []
    for driver in await repo.get_drivers_expiring_by(cutoff):
        items.extend(_collect(driver, "driver", DRIVER_FIELDS, today, notice_days))
    for vehicle in await repo.get_vehicles_expiring_by(cutoff):
        items.extend(_collect(vehicle, "vehicle", VEHICLE_FIELDS, today, notice_days))

    items.sort(key=lambda i: (BUCKET_ORDER[i.bucket], i.days_until_expiry))

    scan = ExpiryScanOut(as_of=today, notice_days=notice_days, all=items)
    for item in items:
        getattr(scan, item.bucket.value).append(item)

    logger.info(
        f"[EXPIRY] {len(items)} credential(s) within {notice_days} days: "
        f"expired={len(scan.expired)} critical={len(scan.critical)} "
        f"urgent={len(scan.urgent)} warning={len(scan.warning)}"
    )
    return scan
