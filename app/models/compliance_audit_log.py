"""
Append-only compliance audit trail.
One row per gated compliance check or admin override. Never updated or deleted.
"""

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text
from app.database import Base


class ComplianceAuditLog(Base):
    __tablename__ = "compliance_audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action_type = Column(String(50), nullable=False, index=True)   # assignment | driver | vehicle | hos | clock_in
    action_endpoint = Column(String(255))
    driver_id = Column(Integer, index=True)
    vehicle_id = Column(Integer, index=True)
    booking_id = Column(Integer)
    was_blocked = Column(Boolean, nullable=False, default=False)
    block_reason = Column(Text)
    violations = Column(Text)                     # JSON-encoded violation list
    was_overridden = Column(Boolean, nullable=False, default=False)
    overridden_by = Column(Integer)
    override_reason = Column(Text)
    tour_date = Column(Date)
    request_ip = Column(String(100))
    user_agent = Column(String(500))
    triggered_by = Column(Integer)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<ComplianceAuditLog {self.id} action={self.action_type} blocked={self.was_blocked}>"
