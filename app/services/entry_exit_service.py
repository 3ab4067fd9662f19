# app/services/entry_exit_service.py
"""
Entry/Exit log repository + ENTRY/EXIT decision.

How it works:
  - Every successful scan appends one EntryExitLog row (ENTRY or EXIT)
  - The next kind for a user is the opposite of their most recent row:
      no rows or last EXIT → ENTRY
      last ENTRY           → EXIT
  - Rows are never updated; only the maintenance reset deletes them
"""

from datetime import datetime, date, time, timedelta
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.entry_exit_log import EntryExitLog, LogType
from app.utils.logger import get_logger

logger = get_logger(__name__)


def find_most_recent_log(db: Session, user_id: str) -> Optional[EntryExitLog]:
    return (
        db.query(EntryExitLog)
        .filter(EntryExitLog.user_id == user_id)
        .order_by(EntryExitLog.timestamp.desc(), EntryExitLog.id.desc())
        .first()
    )


def determine_log_type(db: Session, user_id: str) -> LogType:
    last_log = find_most_recent_log(db, user_id)
    if last_log is None or last_log.type == LogType.EXIT:
        return LogType.ENTRY
    return LogType.EXIT


def append_log(db: Session, user_id: str, log_type: LogType,
               timestamp: Optional[datetime] = None) -> EntryExitLog:
    """Add a log row and flush it. The caller's commit makes it durable."""
    log = EntryExitLog(user_id=user_id, type=log_type,
                       timestamp=timestamp or datetime.utcnow())
    db.add(log)
    db.flush()
    logger.debug(f"[LOG] {log_type.value} user={user_id} at {log.timestamp.isoformat()}")
    return log


def delete_all_logs(db: Session) -> int:
    """Delete every log row. Caller commits. Returns the number deleted."""
    return db.query(EntryExitLog).delete(synchronize_session=False)


def count_logs(db: Session) -> int:
    return db.query(func.count(EntryExitLog.id)).scalar() or 0


def list_logs(db: Session, limit: int = 50, log_type: Optional[LogType] = None,
              user_id: Optional[str] = None) -> list[EntryExitLog]:
    q = db.query(EntryExitLog)
    if log_type:
        q = q.filter(EntryExitLog.type == log_type)
    if user_id:
        q = q.filter(EntryExitLog.user_id == user_id)
    return q.order_by(EntryExitLog.timestamp.desc(), EntryExitLog.id.desc()).limit(limit).all()


def count_for_day(db: Session, day: date) -> dict:
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    rows = (
        db.query(EntryExitLog.type, func.count(EntryExitLog.id))
        .filter(EntryExitLog.timestamp >= start, EntryExitLog.timestamp < end)
        .group_by(EntryExitLog.type)
        .all()
    )
    counts = {log_type: n for log_type, n in rows}
    return {
        "date": day.isoformat(),
        "entries": counts.get(LogType.ENTRY, 0),
        "exits": counts.get(LogType.EXIT, 0),
    }
