# app/services/credential_rules.py
"""
Date rules shared by the driver and vehicle evaluators.

Two kinds of credential:
  - expiring  (medical cert, license, registration, insurance): has an expiry date.
    Missing → violation, on or past expiry → violation, inside the warning window → warning.
  - recurring (MVR, annual review, DOT inspection): has a last-done date that must
    be no older than ANNUAL_RECHECK_DAYS. No warning tier.

A credential expires on its expiry date: on that day it is already expired (0 days overdue).
"""

from datetime import date, timedelta
from typing import Optional, Tuple

from app.config import settings
from app.schemas.compliance import ComplianceViolation, Severity, ViolationType

CheckOutcome = Tuple[Optional[ComplianceViolation], Optional[ComplianceViolation]]


def check_expiring_credential(expiry: Optional[date], today: date, *, label: str,
                              missing_type: ViolationType, expired_type: ViolationType,
                              regulation: Optional[str] = None,
                              severity: Severity = Severity.CRITICAL) -> CheckOutcome:
    """Returns (violation, warning); at most one of them is set."""
    if expiry is None:
        return ComplianceViolation(
            type=missing_type, severity=severity,
            message=f"{label} not on file", regulation=regulation,
        ), None

    if expiry <= today:
        return ComplianceViolation(
            type=expired_type, severity=severity,
            message=f"{label} expired on {expiry.isoformat()}",
            regulation=regulation, expiry_date=expiry,
            days_overdue=(today - expiry).days,
        ), None

    if expiry <= today + timedelta(days=settings.EXPIRY_WARNING_DAYS):
        return None, ComplianceViolation(
            type=expired_type, severity=Severity.WARNING,
            message=f"{label} expires on {expiry.isoformat()}",
            expiry_date=expiry,
        )

    return None, None


def check_recurring_credential(last_done: Optional[date], today: date, *,
                               missing_message: str, expired_message: str,
                               missing_type: ViolationType, expired_type: ViolationType,
                               regulation: Optional[str] = None,
                               severity: Severity = Severity.MAJOR) -> Optional[ComplianceViolation]:
    """expired_message may use {last} for the last-done date."""
    if last_done is None:
        return ComplianceViolation(type=missing_type, severity=severity,
                                   message=missing_message, regulation=regulation)

    if last_done < today - timedelta(days=settings.ANNUAL_RECHECK_DAYS):
        return ComplianceViolation(
            type=expired_type, severity=severity,
            message=expired_message.format(last=last_done.isoformat()),
            regulation=regulation, expiry_date=last_done,
        )
    return None


def as_date(value) -> Optional[date]:
    """Normalise a Date/DateTime column value (or ISO string) to a date."""
    if value is None:
        return None
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    if hasattr(value, "date") and callable(value.date):
        return value.date()
    return value
