"""Unit tests for the compliance audit logger."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import OperationalError
from app.exceptions import ComplianceAuditError
from app.schemas.audit_log import AuditContext
from app.services.assignment_service import check_assignment_compliance
from app.services.audit_service import log_compliance_check
from app.services.compliance_repository import ComplianceRepository
from conftest import NOW, TODAY, days


class TestAuditService:
    @pytest.mark.asyncio
    async def test_blocked_check_writes_one_row(self, make_repo, make_driver):
        repo = make_repo(driver=make_driver(license_expiry=days(-1)))
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)

        entry = await log_compliance_check(repo, "assignment", "/api/v1/compliance/check", result,
                                           AuditContext(driver_id=1, vehicle_id=7, tour_date=TODAY))

        repo.add_audit_log.assert_awaited_once()
        assert entry.was_blocked is True
        assert entry.block_reason.startswith("Driver's license expired on")
        assert entry.was_overridden is False
        stored = json.loads(entry.violations)
        assert stored[0]["type"] == "license_expired"
        assert stored[0]["days_overdue"] == 1

    @pytest.mark.asyncio
    async def test_override_fields_recorded(self, make_repo, make_driver):
        repo = make_repo(driver=make_driver(road_test_date=None))
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)

        entry = await log_compliance_check(repo, "assignment", "/api/v1/compliance/check", result, AuditContext(
            driver_id=1, vehicle_id=7, was_overridden=True, overridden_by=99,
            override_reason="Road test scheduled, supervisor riding along",
        ))

        assert entry.was_blocked is True
        assert entry.was_overridden is True
        assert entry.overridden_by == 99
        assert entry.override_reason == "Road test scheduled, supervisor riding along"

    @pytest.mark.asyncio
    async def test_passing_check_recorded_as_not_blocked(self, make_repo):
        repo = make_repo()
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)

        entry = await log_compliance_check(repo, "assignment", "/x", result, AuditContext())

        assert entry.was_blocked is False
        assert entry.block_reason is None
        assert json.loads(entry.violations) == []

    @pytest.mark.asyncio
    async def test_write_failure_raises_audit_error(self, make_repo):
        repo = make_repo()
        result = await check_assignment_compliance(repo, 1, 7, TODAY, today=TODAY, now=NOW)
        repo.add_audit_log = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("db down")))

        with pytest.raises(ComplianceAuditError):
            await log_compliance_check(repo, "assignment", "/x", result, AuditContext())


class TestRepositoryAuditWrite:
    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back_and_reraises(self):
        db = MagicMock()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))
        repo = ComplianceRepository(db)

        with pytest.raises(OperationalError):
            await repo.add_audit_log(MagicMock())

        db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_successful_write_commits(self):
        db = MagicMock()
        entry = MagicMock()

        assert await ComplianceRepository(db).add_audit_log(entry) is entry
        db.add.assert_called_once_with(entry)
        db.commit.assert_called_once()


class TestRepositoryResolveViolation:
    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back_and_reraises(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = MagicMock(resolved_date=None)
        db.commit.side_effect = OperationalError("UPDATE", {}, Exception("db down"))

        with pytest.raises(OperationalError):
            await ComplianceRepository(db).resolve_violation(5, TODAY, "Renewed")

        db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_resolves_and_commits(self):
        db = MagicMock()
        record = MagicMock(resolved_date=None)
        db.query.return_value.filter.return_value.first.return_value = record

        assert await ComplianceRepository(db).resolve_violation(5, TODAY, "Renewed") is record
        assert record.resolved_date == TODAY
        assert record.resolution_notes == "Renewed"
        db.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_violation_returns_none(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = None

        assert await ComplianceRepository(db).resolve_violation(99, TODAY) is None
        db.commit.assert_not_called()
