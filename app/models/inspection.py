"""
Vehicle inspections (pre-trip / post-trip / DOT).
Only the most recent inspection that found defects matters for dispatch.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from app.database import Base


class Inspection(Base):
    __tablename__ = "inspections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    driver_id = Column(Integer)
    inspection_type = Column(String(50))            # pre_trip | post_trip | dot
    defects_found = Column(Boolean, nullable=False, default=False)
    defect_severity = Column(String(20))            # critical | major | minor
    defect_description = Column(Text)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Inspection {self.id} vehicle={self.vehicle_id} severity={self.defect_severity}>"
