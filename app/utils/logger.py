# app/utils/logger.py
"""
Logging setup shared by every module.
Console output plus a rotating file; location, size and rotation come from settings.
Compliance decisions are logged with a [COMPLIANCE] / [HOS] / [AUDIT] / [EXPIRY] tag
so the file can be grepped per concern.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
LOG_DIR = settings.LOG_DIR or os.path.join(PROJECT_ROOT, "logs")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def log_file_path() -> str:
    return os.path.join(LOG_DIR, settings.LOG_FILE)


def quiet_logger_names() -> list[str]:
    return [name.strip() for name in settings.QUIET_LOGGERS.split(",") if name.strip()]


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    os.makedirs(LOG_DIR, exist_ok=True)
    audit_file = RotatingFileHandler(
        filename=log_file_path(),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    audit_file.setFormatter(formatter)
    root.addHandler(audit_file)

    for name in quiet_logger_names():
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures the root logger on first use."""
    _configure_root_logger()
    return logging.getLogger(name)
