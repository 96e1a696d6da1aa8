"""
Initialize the compliance database.
Creates every model table, then checks that each table the compliance
checks read from (or the audit trail writes to) is present.
Usage: python scripts/setup/init_db.py [--check-only]
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import create_tables, engine

# table → what uses it
EXPECTED_TABLES = {
    "users": "driver qualification checks (role='driver')",
    "vehicles": "vehicle roadworthiness checks",
    "inspections": "critical-defect check",
    "time_cards": "hours-of-service check",
    "compliance_violations": "open-violation checks, resolve endpoint",
    "compliance_audit_log": "audit trail for every gated check",
}


def missing_tables(existing) -> list[str]:
    existing = set(existing)
    return [name for name in EXPECTED_TABLES if name not in existing]


def main():
    parser = argparse.ArgumentParser(description="Create and verify compliance tables")
    parser.add_argument("--check-only", action="store_true", help="Verify tables without creating them")
    args = parser.parse_args()

    print("🗄️  Compliance DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except SQLAlchemyError as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    if not args.check_only:
        print("\n📋 Creating tables...")
        create_tables()

    existing = inspect(engine).get_table_names()
    missing = missing_tables(existing)

    print(f"\n📊 Compliance tables ({len(EXPECTED_TABLES) - len(missing)}/{len(EXPECTED_TABLES)} present):")
    for name, purpose in EXPECTED_TABLES.items():
        mark = "✗" if name in missing else "✓"
        print(f"   {mark} {name:<24} {purpose}")

    if missing:
        print(f"\n❌ Missing: {', '.join(missing)}")
        sys.exit(1)

    print("\n🎉 Database ready! Start the backend with:")
    print(f"   uvicorn app.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT}")


if __name__ == "__main__":
    main()
