"""
Fleet vehicle compliance record.
Registration, insurance and DOT inspection dates are read by the vehicle evaluator.
"""

from sqlalchemy import Column, Integer, String, Boolean, Date
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    registration_expiry = Column(Date)
    insurance_expiry = Column(Date)
    last_dot_inspection = Column(Date)

    def __repr__(self):
        return f"<Vehicle {self.id} name={self.name} active={self.is_active}>"
