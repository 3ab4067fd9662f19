# app/models/entry_exit_log.py
"""
Entry/Exit log table.
One row per successful scan. Rows are append-only; the only deletion path
is the maintenance reset (maintenance_service.reset_data).
"""

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey
from app.database import Base


class LogType(str, enum.Enum):
    ENTRY = "ENTRY"
    EXIT = "EXIT"


class EntryExitLog(Base):
    __tablename__ = "entry_exit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(LogType), nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<EntryExitLog {self.id} user={self.user_id} type={self.type}>"
