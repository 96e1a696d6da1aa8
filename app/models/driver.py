"""
Driver qualification record (the `users` table, role='driver').
One row per driver. Credential dates are maintained by HR/admin workflows;
the compliance evaluators only read them.
"""

from sqlalchemy import Column, Integer, String, Boolean, Date
from app.database import Base


class Driver(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), index=True)
    role = Column(String(50), nullable=False, default="driver", index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    employment_status = Column(String(50), nullable=False, default="active")  # active | suspended | terminated
    medical_cert_expiry = Column(Date)
    license_expiry = Column(Date)
    mvr_check_date = Column(Date)
    annual_review_date = Column(Date)
    road_test_date = Column(Date)
    dq_file_complete = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Driver {self.id} name={self.name} status={self.employment_status}>"
