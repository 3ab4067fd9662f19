# app/services/maintenance_service.py
"""
Out-of-band data reset: clears the entry/exit log and zeroes occupancy.
Max capacity is kept. Used by scripts/setup/reset_data.py and the admin
reset endpoint, never by the scan flow.
"""

from sqlalchemy.orm import Session
from app.schemas.occupancy import ResetSummaryOut
from app.services.entry_exit_service import delete_all_logs
from app.services.occupancy_service import read_occupancy, reset_occupancy_to_zero
from app.utils.logger import get_logger

logger = get_logger(__name__)


def reset_data(db: Session) -> ResetSummaryOut:
    before = read_occupancy(db)
    logger.info(f"[RESET] Starting — occupancy {before.current_occupancy}/{before.max_capacity}")

    try:
        deleted = delete_all_logs(db)
        config = reset_occupancy_to_zero(db)
        db.commit()
    except Exception:
        db.rollback()
        logger.error("[RESET] Failed, nothing changed", exc_info=True)
        raise

    logger.warning(f"[RESET] Deleted {deleted} entry/exit logs, occupancy reset to 0")
    return ResetSummaryOut(
        deleted_logs=deleted,
        previous_occupancy=before.current_occupancy,
        current_occupancy=config.current_occupancy,
        max_capacity=config.max_capacity,
    )
