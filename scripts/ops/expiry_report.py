"""
Print credentials (driver license / medical cert, vehicle insurance / registration)
expiring inside the notice window. Intended for a daily cron run.
Usage: python scripts/ops/expiry_report.py [--days 40]
"""

import sys
import os
import argparse
import asyncio
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal
from app.config import settings
from app.services.compliance_repository import ComplianceRepository
from app.services.expiry_service import scan_expiring_credentials

ICONS = {"expired": "⛔", "critical": "🔴", "urgent": "🟠", "warning": "🔵"}


async def run(days: int) -> int:
    db = SessionLocal()
    try:
        scan = await scan_expiring_credentials(ComplianceRepository(db), notice_days=days)
    finally:
        db.close()

    print(f"📋 Credentials expiring within {scan.notice_days} days (as of {scan.as_of})")
    print("=" * 60)
    if not scan.all:
        print("✅ Nothing due")
        return 0

    for item in scan.all:
        status = "EXPIRED" if item.days_until_expiry <= 0 else f"{item.days_until_expiry} day(s)"
        print(f"{ICONS[item.bucket.value]} [{item.entity_type}] {item.entity_name} — "
              f"{item.field_label}: {item.expiry_date} ({status})")

    return 1 if scan.expired else 0


def main():
    parser = argparse.ArgumentParser(description="Expiring credential report")
    parser.add_argument("--days", type=int, default=settings.EXPIRY_NOTICE_DAYS)
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.days)))


if __name__ == "__main__":
    main()
