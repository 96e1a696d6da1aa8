"""Shared factories for compliance tests. Dates are pinned to a fixed 'today'."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from app.models.driver import Driver
from app.models.inspection import Inspection
from app.models.time_card import TimeCard
from app.models.vehicle import Vehicle

TODAY = date(2026, 3, 15)
NOW = datetime(2026, 3, 15, 18, 0, 0)


def days(n):
    return TODAY + timedelta(days=n)


@pytest.fixture
def make_driver():
    def _make(**overrides):
        fields = dict(
            id=1, name="John Driver", email="john@example.com", role="driver",
            is_active=True, employment_status="active",
            medical_cert_expiry=days(180), license_expiry=days(365),
            mvr_check_date=days(-30), annual_review_date=days(-30),
            road_test_date=days(-90), dq_file_complete=True,
        )
        fields.update(overrides)
        return Driver(**fields)
    return _make


@pytest.fixture
def make_vehicle():
    def _make(**overrides):
        fields = dict(
            id=7, name="Sprinter 1", is_active=True,
            registration_expiry=days(200), insurance_expiry=days(200),
            last_dot_inspection=days(-60),
        )
        fields.update(overrides)
        return Vehicle(**fields)
    return _make


@pytest.fixture
def make_time_card():
    def _make(activity="driving", start=None, hours=1.0, total=None, open_segment=False, driver_id=1):
        start = start or datetime.combine(TODAY, datetime.min.time()).replace(hour=8)
        return TimeCard(
            driver_id=driver_id,
            activity_type=activity,
            clock_in_time=start,
            clock_out_time=None if open_segment else start + timedelta(hours=hours),
            total_hours_worked=hours if total is None else total,
        )
    return _make


@pytest.fixture
def make_defect_inspection():
    def _make(severity="critical", vehicle_id=7):
        return Inspection(vehicle_id=vehicle_id, defects_found=True, defect_severity=severity,
                          created_at=NOW - timedelta(days=1))
    return _make


@pytest.fixture
def make_repo(make_driver, make_vehicle):
    """Fake ComplianceRepository. Defaults describe a fully compliant driver + vehicle with no hours."""
    _default = object()

    def _make(driver=_default, vehicle=_default, open_violations=0, defect=None, time_cards=None):
        repo = MagicMock()
        repo.get_driver = AsyncMock(return_value=make_driver() if driver is _default else driver)
        repo.get_vehicle = AsyncMock(return_value=make_vehicle() if vehicle is _default else vehicle)
        if isinstance(open_violations, dict):
            repo.count_open_critical_violations = AsyncMock(
                side_effect=lambda entity_type, entity_id: open_violations.get(entity_type, 0))
        else:
            repo.count_open_critical_violations = AsyncMock(return_value=open_violations)
        repo.get_latest_defect_inspection = AsyncMock(return_value=defect)
        repo.get_time_cards = AsyncMock(return_value=time_cards or [])
        repo.add_audit_log = AsyncMock(side_effect=lambda entry: entry)
        return repo
    return _make
