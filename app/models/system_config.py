# app/models/system_config.py
"""
System config table — singleton row holding the facility occupancy counter.
Only occupancy_service mutates current_occupancy.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime, CheckConstraint
from app.database import Base


class SystemConfig(Base):
    __tablename__ = "system_config"
    __table_args__ = (
        CheckConstraint("current_occupancy >= 0", name="ck_occupancy_non_negative"),
        CheckConstraint("max_capacity > 0", name="ck_capacity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    current_occupancy = Column(Integer, default=0, nullable=False)
    max_capacity = Column(Integer, default=100, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SystemConfig occupancy={self.current_occupancy}/{self.max_capacity}>"
