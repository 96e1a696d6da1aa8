# app/services/assignment_service.py
"""
Driver + vehicle + HOS decision for a dispatch assignment.

The three evaluators read disjoint rows and run concurrently; their results
are merged in a fixed order (driver, vehicle, HOS) so the primary violation
is deterministic.
"""

import asyncio
from datetime import date, datetime
from typing import Optional

from app.exceptions import MissingComplianceEntityError
from app.schemas.compliance import (
    AssignmentComplianceResult, CheckType, ComplianceCheckResult, DriverComplianceResult,
    HOSComplianceResult, VehicleComplianceResult,
)
from app.schemas.compliance_check import ComplianceEntities
from app.services.compliance_repository import ComplianceRepository
from app.services.driver_compliance_service import check_driver_compliance
from app.services.hos_service import check_hos_compliance
from app.services.vehicle_compliance_service import check_vehicle_compliance
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _permits_override(result: ComplianceCheckResult) -> bool:
    # A sub-check that passed has nothing to override and does not veto.
    return result.can_proceed or result.allows_admin_override


def combine_results(driver: DriverComplianceResult, vehicle: VehicleComplianceResult,
                    hos: HOSComplianceResult) -> AssignmentComplianceResult:
    all_violations = [*driver.violations, *vehicle.violations, *hos.violations]
    all_warnings = [*driver.warnings, *vehicle.warnings, *hos.warnings]
    can_proceed = driver.can_proceed and vehicle.can_proceed and hos.can_proceed
    allows_override = (
        not can_proceed
        and _permits_override(driver)
        and _permits_override(vehicle)
        and _permits_override(hos)
    )
    return AssignmentComplianceResult(
        can_proceed=can_proceed,
        driver_compliance=driver,
        vehicle_compliance=vehicle,
        hos_compliance=hos,
        all_violations=all_violations,
        all_warnings=all_warnings,
        primary_violation=all_violations[0] if all_violations else None,
        allows_admin_override=allows_override,
    )


async def check_assignment_compliance(repo: ComplianceRepository, driver_id: int, vehicle_id: int,
                                      tour_date: date, today: Optional[date] = None,
                                      now: Optional[datetime] = None) -> AssignmentComplianceResult:
    if today is None and now is not None:
        today = now.date()
    driver, vehicle, hos = await asyncio.gather(
        check_driver_compliance(repo, driver_id, today=today),
        check_vehicle_compliance(repo, vehicle_id, today=today),
        check_hos_compliance(repo, driver_id, tour_date, now=now),
    )
    result = combine_results(driver, vehicle, hos)
    logger.info(
        f"[COMPLIANCE] Assignment driver={driver_id} vehicle={vehicle_id} date={tour_date}: "
        f"can_proceed={result.can_proceed} override={result.allows_admin_override} "
        f"violations={len(result.all_violations)}"
    )
    return result


def _require(check_type: CheckType, entities: ComplianceEntities, *fields):
    missing = [f for f in fields if getattr(entities, f) is None]
    if missing:
        raise MissingComplianceEntityError(check_type.value, missing)


async def run_compliance_check(repo: ComplianceRepository, check_type: CheckType,
                               entities: ComplianceEntities, today: Optional[date] = None,
                               now: Optional[datetime] = None) -> AssignmentComplianceResult:
    """
    Run the check a dispatch operation asks for and shape it as an assignment result.
    Sub-checks that were not requested are reported as passing.
    """
    today = today or (now.date() if now else date.today())

    if check_type == CheckType.ASSIGNMENT:
        _require(check_type, entities, "driver_id", "vehicle_id", "tour_date")
        return await check_assignment_compliance(
            repo, entities.driver_id, entities.vehicle_id, entities.tour_date, today=today, now=now,
        )

    if check_type == CheckType.DRIVER:
        _require(check_type, entities, "driver_id")
        driver = await check_driver_compliance(repo, entities.driver_id, today=today)
        return combine_results(
            driver,
            VehicleComplianceResult.passing(vehicle_id=entities.vehicle_id or 0),
            HOSComplianceResult.passing(driver_id=entities.driver_id, tour_date=entities.tour_date or today),
        )

    if check_type == CheckType.VEHICLE:
        _require(check_type, entities, "vehicle_id")
        vehicle = await check_vehicle_compliance(repo, entities.vehicle_id, today=today)
        return combine_results(
            DriverComplianceResult.passing(driver_id=entities.driver_id or 0),
            vehicle,
            HOSComplianceResult.passing(driver_id=entities.driver_id or 0, tour_date=entities.tour_date or today),
        )

    # HOS and clock-in: the tour date defaults to today
    _require(check_type, entities, "driver_id")
    hos = await check_hos_compliance(repo, entities.driver_id, entities.tour_date or today, now=now)
    return combine_results(
        DriverComplianceResult.passing(driver_id=entities.driver_id),
        VehicleComplianceResult.passing(vehicle_id=entities.vehicle_id or 0),
        hos,
    )
