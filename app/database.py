# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL. All models are auto-imported here
so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    pool_size=10,
    max_overflow=20,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    # Entity tables (owned by HR / fleet workflows, read-only here)
    from app.models.driver import Driver                                  # noqa
    from app.models.vehicle import Vehicle                                # noqa
    from app.models.inspection import Inspection                          # noqa
    from app.models.time_card import TimeCard                             # noqa
    from app.models.compliance_violation import ComplianceViolationRecord  # noqa
    # Append-only audit trail
    from app.models.compliance_audit_log import ComplianceAuditLog        # noqa

    Base.metadata.create_all(bind=engine)
