# Tour Compliance — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.driver import Driver                                  # noqa
from app.models.vehicle import Vehicle                                # noqa
from app.models.inspection import Inspection                          # noqa
from app.models.time_card import TimeCard                             # noqa
from app.models.compliance_violation import ComplianceViolationRecord  # noqa
from app.models.compliance_audit_log import ComplianceAuditLog        # noqa
