"""
Recorded compliance violations against a driver or vehicle.
A row stays open until resolved_date is set; open critical rows block dispatch.
"""

from sqlalchemy import Column, Integer, String, Date, Text
from app.database import Base


class ComplianceViolationRecord(Base):
    __tablename__ = "compliance_violations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(20), nullable=False, index=True)   # driver | vehicle
    entity_id = Column(Integer, nullable=False, index=True)
    violation_type = Column(String(100))
    severity = Column(String(20), nullable=False)                  # critical | major | minor
    description = Column(Text)
    violation_date = Column(Date)
    resolved_date = Column(Date)
    resolution_notes = Column(Text)

    def __repr__(self):
        return f"<ComplianceViolationRecord {self.id} {self.entity_type}={self.entity_id} severity={self.severity}>"
