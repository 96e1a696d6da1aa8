"""
Driver time cards. Each row is one duty segment tagged driving | on_duty | off_duty.
The HOS evaluator sums segment durations per day and total_hours_worked per week;
open segments are measured up to the evaluation time.
"""

from sqlalchemy import Column, Integer, String, DateTime, Float
from app.database import Base


class TimeCard(Base):
    __tablename__ = "time_cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, nullable=False, index=True)
    vehicle_id = Column(Integer)
    activity_type = Column(String(20), nullable=False, default="on_duty")
    clock_in_time = Column(DateTime, nullable=False, index=True)
    clock_out_time = Column(DateTime)             # NULL while the segment is open
    total_hours_worked = Column(Float)

    def __repr__(self):
        return f"<TimeCard {self.id} driver={self.driver_id} activity={self.activity_type}>"
