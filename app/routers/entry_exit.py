# app/routers/entry_exit.py
"""Entry/Exit log endpoints."""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.entry_exit_log import LogType
from app.schemas.entry_exit_log import EntryExitLogOut, DailyCountOut
from app.services.entry_exit_service import list_logs, count_for_day

router = APIRouter()


@router.get("/entry-exit", response_model=list[EntryExitLogOut], summary="Get entry/exit log")
def get_entry_exit_log(limit: int = 50, type: Optional[LogType] = None,
                       user_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Returns the most recent entry/exit events, newest first."""
    return list_logs(db, limit=limit, log_type=type, user_id=user_id)


@router.get("/entry-exit/count/today", response_model=DailyCountOut, summary="Today's entries and exits")
def get_today_counts(db: Session = Depends(get_db)):
    return count_for_day(db, datetime.utcnow().date())
