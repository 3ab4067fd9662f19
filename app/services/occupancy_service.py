# app/services/occupancy_service.py
"""
Facility occupancy store.
Table: system_config (single row, id=1)
Scan flow: is_capacity_full() gates ENTRY scans, apply_delta() moves the counter ±1

apply_delta issues one UPDATE with the arithmetic done in SQL, so concurrent
scans never lose an increment. The capacity gate is a separate read and two
simultaneous entries at max_capacity - 1 can both pass it (overshoot of one).
Set STRICT_CAPACITY=true to make the UPDATE itself refuse to exceed capacity.
"""

from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import update, case
from sqlalchemy.orm import Session
from app.models.system_config import SystemConfig
from app.schemas.occupancy import OccupancyStatusOut
from app.services.notification_service import build_occupancy_status
from app.exceptions import CapacityExceededError
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

CONFIG_ID = 1


@dataclass
class OccupancyState:
    current_occupancy: int
    max_capacity: int
    updated_at: datetime

    @property
    def is_at_capacity(self) -> bool:
        return self.current_occupancy >= self.max_capacity


def _to_state(config: SystemConfig) -> OccupancyState:
    return OccupancyState(
        current_occupancy=config.current_occupancy,
        max_capacity=config.max_capacity,
        updated_at=config.updated_at,
    )


def _get_or_create_config(db: Session, commit: bool = False) -> SystemConfig:
    """Load the singleton row, adding it on first use. Flushed only unless commit=True."""
    config = db.query(SystemConfig).filter(SystemConfig.id == CONFIG_ID).first()
    if config is None:
        config = SystemConfig(id=CONFIG_ID, current_occupancy=0,
                              max_capacity=settings.MAX_CAPACITY,
                              updated_at=datetime.utcnow())
        db.add(config)
        if commit:
            db.commit()
        else:
            db.flush()
        logger.info(f"[OCCUPANCY] Created system config with capacity {settings.MAX_CAPACITY}")
    return config


def read_occupancy(db: Session) -> OccupancyState:
    return _to_state(_get_or_create_config(db, commit=True))


def is_capacity_full(db: Session) -> bool:
    return read_occupancy(db).is_at_capacity


def apply_delta(db: Session, is_entry: bool) -> OccupancyState:
    """
    +1 for an entry, -1 for an exit (never below zero), then commit.
    Commits whatever else is pending on the session, so a log row added
    beforehand lands in the same transaction as the counter change.

    The returned state is the row as written by this UPDATE (RETURNING),
    not a re-read, so a scan committing right after ours can't leak into it.
    """
    config = _get_or_create_config(db)
    current = SystemConfig.current_occupancy
    if is_entry:
        new_value = current + 1
    else:
        new_value = case((current > 0, current - 1), else_=0)

    stmt = (
        update(SystemConfig)
        .where(SystemConfig.id == config.id)
        .values(current_occupancy=new_value, updated_at=datetime.utcnow())
    )
    if is_entry and settings.STRICT_CAPACITY:
        stmt = stmt.where(current < SystemConfig.max_capacity)
    stmt = stmt.returning(
        SystemConfig.current_occupancy, SystemConfig.max_capacity, SystemConfig.updated_at,
    ).execution_options(synchronize_session=False)

    row = db.execute(stmt).first()
    if row is None:
        db.rollback()
        raise CapacityExceededError(
            "Cannot allow entry. Please try again later.",
            error=f"{settings.FACILITY_NAME} is at maximum capacity",
        )
    state = OccupancyState(
        current_occupancy=row.current_occupancy,
        max_capacity=row.max_capacity,
        updated_at=row.updated_at,
    )

    db.commit()
    logger.info(f"[OCCUPANCY] {'+1' if is_entry else '-1'} → "
                f"{state.current_occupancy}/{state.max_capacity}")
    return state


def set_capacity(db: Session, max_capacity: int) -> OccupancyState:
    config = _get_or_create_config(db)
    config.max_capacity = max_capacity
    config.updated_at = datetime.utcnow()
    db.commit()
    logger.info(f"[OCCUPANCY] Max capacity set to {max_capacity}")
    return _to_state(config)


def reset_occupancy_to_zero(db: Session) -> SystemConfig:
    """Zero the counter. Caller commits (see maintenance_service.reset_data)."""
    config = _get_or_create_config(db)
    config.current_occupancy = 0
    config.updated_at = datetime.utcnow()
    return config


def get_occupancy_status(db: Session) -> OccupancyStatusOut:
    """Current status for polling clients. lastUpdated is the stored update time."""
    return build_occupancy_status(read_occupancy(db))
