"""Unit tests for the combined driver + vehicle + HOS assignment decision."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import pytest
from unittest.mock import patch
from app.exceptions import MissingComplianceEntityError
from app.schemas.compliance import (
    CheckType, ComplianceViolation, DriverComplianceResult, HOSComplianceResult, Severity,
    VehicleComplianceResult, ViolationType,
)
from app.schemas.compliance_check import ComplianceEntities
from app.services.assignment_service import (
    check_assignment_compliance, combine_results, run_compliance_check,
)
from conftest import NOW, TODAY, days


def violation(vtype, severity=Severity.CRITICAL):
    return ComplianceViolation(type=vtype, severity=severity, message=vtype.value)


def sub_result(cls, blocked=False, overridable=False, **ids):
    violations = [violation(ViolationType.REGISTRATION_MISSING)] if blocked else []
    return cls(is_compliant=not blocked, can_proceed=not blocked, violations=violations, warnings=[],
               allows_admin_override=blocked and overridable,
               primary_violation=violations[0] if violations else None, **ids)


def driver_result(**kw):
    return sub_result(DriverComplianceResult, driver_id=1, **kw)


def vehicle_result(**kw):
    return sub_result(VehicleComplianceResult, vehicle_id=7, **kw)


def hos_result(**kw):
    return sub_result(HOSComplianceResult, driver_id=1, tour_date=TODAY, **kw)


class TestCombineResults:
    @pytest.mark.parametrize("d,v,h", [
        (True, True, True), (False, True, True), (True, False, True),
        (True, True, False), (False, False, False),
    ])
    def test_can_proceed_is_logical_and(self, d, v, h):
        result = combine_results(driver_result(blocked=not d), vehicle_result(blocked=not v),
                                 hos_result(blocked=not h))

        assert result.can_proceed == (d and v and h)

    def test_any_blocked_non_overridable_vetoes_override(self):
        result = combine_results(driver_result(blocked=True, overridable=True),
                                 vehicle_result(blocked=True, overridable=False),
                                 hos_result())

        assert result.can_proceed is False
        assert result.allows_admin_override is False

    def test_overridable_blocks_with_passing_hos_allow_override(self):
        result = combine_results(driver_result(blocked=True, overridable=True),
                                 vehicle_result(), hos_result())

        assert result.allows_admin_override is True

    def test_passing_assignment_never_reports_override(self):
        result = combine_results(driver_result(), vehicle_result(), hos_result())

        assert result.can_proceed is True
        assert result.allows_admin_override is False

    def test_concatenates_driver_then_vehicle_then_hos(self):
        driver = driver_result(blocked=True)
        driver.violations = [violation(ViolationType.LICENSE_MISSING)]
        vehicle = vehicle_result(blocked=True)
        vehicle.violations = [violation(ViolationType.INSURANCE_MISSING)]
        hos = hos_result(blocked=True)
        hos.violations = [violation(ViolationType.HOS_WEEKLY_EXCEEDED)]
        hos.warnings = [violation(ViolationType.HOS_DAILY_DRIVING_EXCEEDED, Severity.WARNING)]

        result = combine_results(driver, vehicle, hos)

        assert [v.type for v in result.all_violations] == [
            ViolationType.LICENSE_MISSING, ViolationType.INSURANCE_MISSING, ViolationType.HOS_WEEKLY_EXCEEDED,
        ]
        assert [w.type for w in result.all_warnings] == [ViolationType.HOS_DAILY_DRIVING_EXCEEDED]
        assert result.primary_violation.type == ViolationType.LICENSE_MISSING


class TestCheckAssignmentCompliance:
    @pytest.mark.asyncio
    async def test_fully_compliant_assignment(self, make_repo):
        result = await check_assignment_compliance(make_repo(), 1, 7, TODAY, today=TODAY, now=NOW)

        assert result.can_proceed is True
        assert result.all_violations == []
        assert result.all_warnings == []
        assert result.primary_violation is None

    @pytest.mark.asyncio
    async def test_expired_license_blocks_without_override(self, make_repo, make_driver):
        repo = make_repo(driver=make_driver(license_expiry=days(-1)))
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)

        assert result.can_proceed is False
        assert result.allows_admin_override is False
        assert result.primary_violation.type == ViolationType.LICENSE_EXPIRED

    @pytest.mark.asyncio
    async def test_overridable_driver_block(self, make_repo, make_driver):
        repo = make_repo(driver=make_driver(road_test_date=None))
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)

        assert result.can_proceed is False
        assert result.allows_admin_override is True

    @pytest.mark.asyncio
    async def test_hos_violation_vetoes_override(self, make_repo, make_driver, make_time_card):
        repo = make_repo(driver=make_driver(road_test_date=None),
                         time_cards=[make_time_card("driving", hours=10.0)])
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)

        assert result.can_proceed is False
        assert result.allows_admin_override is False
        assert result.all_violations[-1].type == ViolationType.HOS_DAILY_DRIVING_EXCEEDED

    @pytest.mark.asyncio
    async def test_today_follows_now_when_not_given(self, make_repo, make_driver):
        repo = make_repo(driver=make_driver(license_expiry=NOW.date()))
        result = await check_assignment_compliance(repo, 1, 7, TODAY, now=NOW)

        assert result.primary_violation.type == ViolationType.LICENSE_EXPIRED
        assert result.primary_violation.days_overdue == 0

    @pytest.mark.asyncio
    async def test_evaluators_run_concurrently(self, make_repo):
        started = []
        gate = asyncio.Event()

        def blocking(name, result):
            async def _run(*args, **kwargs):
                started.append(name)
                if len(started) == 3:
                    gate.set()
                await asyncio.wait_for(gate.wait(), timeout=1)
                return result
            return _run

        with patch("app.services.assignment_service.check_driver_compliance",
                   side_effect=blocking("driver", driver_result())), \
             patch("app.services.assignment_service.check_vehicle_compliance",
                   side_effect=blocking("vehicle", vehicle_result())), \
             patch("app.services.assignment_service.check_hos_compliance",
                   side_effect=blocking("hos", hos_result())):
            result = await check_assignment_compliance(make_repo(), 1, 7, TODAY)

        assert sorted(started) == ["driver", "hos", "vehicle"]
        assert result.can_proceed is True


class TestRunComplianceCheck:
    @pytest.mark.asyncio
    async def test_assignment_requires_all_entities(self, make_repo):
        with pytest.raises(MissingComplianceEntityError) as exc:
            await run_compliance_check(make_repo(), CheckType.ASSIGNMENT,
                                       ComplianceEntities(driver_id=1), today=TODAY)

        assert exc.value.missing == ["vehicle_id", "tour_date"]

    @pytest.mark.asyncio
    async def test_driver_only_check(self, make_repo, make_driver):
        repo = make_repo(driver=make_driver(mvr_check_date=None, road_test_date=None))
        result = await run_compliance_check(repo, CheckType.DRIVER, ComplianceEntities(driver_id=1), today=TODAY)

        assert result.can_proceed is False
        assert result.allows_admin_override is True
        assert result.vehicle_compliance.can_proceed is True
        repo.get_vehicle.assert_not_called()
        repo.get_time_cards.assert_not_called()

    @pytest.mark.asyncio
    async def test_vehicle_only_check(self, make_repo, make_vehicle):
        repo = make_repo(vehicle=make_vehicle(is_active=False))
        result = await run_compliance_check(repo, CheckType.VEHICLE, ComplianceEntities(vehicle_id=7), today=TODAY)

        assert result.primary_violation.type == ViolationType.VEHICLE_INACTIVE
        repo.get_driver.assert_not_called()

    @pytest.mark.asyncio
    async def test_clock_in_defaults_to_today_and_never_overrides(self, make_repo, make_time_card):
        repo = make_repo(time_cards=[make_time_card("on_duty", hours=15.0)])
        result = await run_compliance_check(repo, CheckType.CLOCK_IN, ComplianceEntities(driver_id=1),
                                            today=TODAY, now=NOW)

        assert result.hos_compliance.tour_date == TODAY
        assert result.can_proceed is False
        assert result.allows_admin_override is False
        repo.get_driver.assert_not_called()
