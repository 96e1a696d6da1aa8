# app/services/hos_service.py
"""
Hours of Service checks (49 CFR 395.5, passenger-carrying vehicles).

Limits come from settings:
  - HOS_MAX_DRIVING_HOURS  — driving time on the tour date
  - HOS_MAX_ON_DUTY_HOURS  — driving + on-duty time on the tour date
  - HOS_MAX_HOURS_7_DAYS   — total hours worked over the 7 days ending on the tour date

Reaching a limit is a critical violation; landing inside the warning margin
below it is a warning. HOS results never allow an admin override.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from app.config import settings
from app.models.time_card import TimeCard
from app.schemas.compliance import ComplianceViolation, HOSComplianceResult, Severity, ViolationType
from app.services.compliance_repository import ComplianceRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)

HOS_REGULATION = "49 CFR 395.5"
DRIVING = "driving"
ON_DUTY_ACTIVITIES = {"driving", "on_duty"}


def segment_hours(card: TimeCard, now: datetime) -> float:
    """Length of one time-card segment in hours. An open segment runs until `now`."""
    end = card.clock_out_time or now
    seconds = (end - card.clock_in_time).total_seconds()
    return max(seconds, 0) / 3600


def daily_hours(cards: Iterable[TimeCard], tour_date: date, now: datetime) -> Tuple[float, float]:
    """(driving_hours, on_duty_hours) for segments clocked in on tour_date."""
    driving = on_duty = 0.0
    for card in cards:
        if card.clock_in_time.date() != tour_date:
            continue
        hours = segment_hours(card, now)
        if card.activity_type == DRIVING:
            driving += hours
        if card.activity_type in ON_DUTY_ACTIVITIES:
            on_duty += hours
    return driving, on_duty


def weekly_hours(cards: Iterable[TimeCard], now: datetime) -> float:
    """Total hours over the window. Open or untotalled segments are measured up to `now`."""
    total = 0.0
    for card in cards:
        if card.clock_out_time is None or card.total_hours_worked is None:
            total += segment_hours(card, now)
        else:
            total += card.total_hours_worked
    return total


def _check_limit(hours: float, limit: float, margin: float, violation_type: ViolationType,
                 exceeded_label: str, approaching_label: str):
    """Returns (violation, warning) for one limit; at most one is set."""
    if hours >= limit:
        return ComplianceViolation(
            type=violation_type,
            severity=Severity.CRITICAL,
            message=f"{exceeded_label} exceeded ({hours:.1f} of {limit:g} hours)",
            regulation=HOS_REGULATION,
        ), None
    if hours >= limit - margin:
        return None, ComplianceViolation(
            type=violation_type,
            severity=Severity.WARNING,
            message=f"Approaching {approaching_label} ({hours:.1f} of {limit:g} hours)",
        )
    return None, None


async def check_hos_compliance(repo: ComplianceRepository, driver_id: int, tour_date: date,
                               now: Optional[datetime] = None) -> HOSComplianceResult:
    now = now or datetime.now()
    window_start = tour_date - timedelta(days=settings.HOS_WEEKLY_WINDOW_DAYS - 1)
    cards = await repo.get_time_cards(driver_id, window_start, tour_date)

    driving, on_duty = daily_hours(cards, tour_date, now)
    weekly = weekly_hours(cards, now)

    violations: List[ComplianceViolation] = []
    warnings: List[ComplianceViolation] = []
    for violation, warning in (
        _check_limit(driving, settings.HOS_MAX_DRIVING_HOURS, settings.HOS_DRIVING_WARNING_MARGIN,
                     ViolationType.HOS_DAILY_DRIVING_EXCEEDED,
                     "Daily driving limit", "daily driving limit"),
        _check_limit(on_duty, settings.HOS_MAX_ON_DUTY_HOURS, settings.HOS_ON_DUTY_WARNING_MARGIN,
                     ViolationType.HOS_DAILY_ON_DUTY_EXCEEDED,
                     "Daily on-duty limit", "daily on-duty limit"),
        _check_limit(weekly, settings.HOS_MAX_HOURS_7_DAYS, settings.HOS_WEEKLY_WARNING_MARGIN,
                     ViolationType.HOS_WEEKLY_EXCEEDED,
                     "Weekly hours limit", "weekly limit"),
    ):
        if violation:
            violations.append(violation)
        if warning:
            warnings.append(warning)

    if violations:
        logger.warning(f"[HOS] Driver {driver_id} on {tour_date}: {violations[0].message}")
    else:
        logger.info(f"[HOS] Driver {driver_id} on {tour_date}: driving={driving:.1f}h "
                    f"on_duty={on_duty:.1f}h week={weekly:.1f}h")

    return HOSComplianceResult(
        driver_id=driver_id,
        tour_date=tour_date,
        is_compliant=not violations,
        can_proceed=not violations,
        violations=violations,
        warnings=warnings,
        allows_admin_override=False,
        primary_violation=violations[0] if violations else None,
        driving_hours=round(driving, 2),
        on_duty_hours=round(on_duty, 2),
        weekly_hours=round(weekly, 2),
        driving_hours_remaining=round(max(settings.HOS_MAX_DRIVING_HOURS - driving, 0), 2),
        on_duty_hours_remaining=round(max(settings.HOS_MAX_ON_DUTY_HOURS - on_duty, 0), 2),
        weekly_hours_remaining=round(max(settings.HOS_MAX_HOURS_7_DAYS - weekly, 0), 2),
    )
