# app/services/scan_service.py
"""
QR scan handling — one call per physical scan at an entry/exit point.

  1. Resolve QR code → user                  (unknown → NotFoundError)
  2. ENTRY or EXIT from the user's last log  (entry_exit_service)
  3. ENTRY only: refuse when full            (CapacityExceededError)
  4. Append the log row
  5. Move the counter and commit 4+5 together
  6. Publish occupancy:update, occupancy:alert, user:action (best effort)

Nothing is written or broadcast when 1-3 reject the scan. Once step 5 has
committed the scan is successful, whatever happens in step 6.
"""

from dataclasses import dataclass
from datetime import datetime
from starlette.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models.entry_exit_log import LogType
from app.schemas.scan import ScanOutcome
from app.services.user_service import find_user_by_qr_code
from app.services.entry_exit_service import determine_log_type, append_log
from app.services.occupancy_service import OccupancyState, is_capacity_full, apply_delta
from app.services.broadcast_service import SafeGateway
from app.services.notification_service import (
    EVENT_OCCUPANCY_UPDATE, EVENT_OCCUPANCY_ALERT, EVENT_USER_ACTION,
    build_occupancy_status, build_alert, build_user_action, to_payload,
)
from app.exceptions import NotFoundError, CapacityExceededError, InternalError
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ScanRecord:
    log_type: LogType
    user_id: str
    user_name: str
    timestamp: datetime
    state: OccupancyState


def record_scan(db: Session, qr_code: str) -> ScanRecord:
    """Steps 1-5. Blocking; handle_scan runs it in the threadpool."""
    try:
        user = find_user_by_qr_code(db, qr_code)
        if not user:
            logger.warning("[SCAN] Rejected: QR code not registered")
            raise NotFoundError("QR code not found in the system", error="Invalid QR code")
        user_id, user_name = user.id, user.display_name

        log_type = determine_log_type(db, user_id)

        if log_type == LogType.ENTRY and is_capacity_full(db):
            logger.warning(f"[SCAN] Entry refused for {user_name}: facility full")
            raise CapacityExceededError(
                "Cannot allow entry. Please try again later.",
                error=f"{settings.FACILITY_NAME} is at maximum capacity",
            )

        log = append_log(db, user_id, log_type)
        timestamp = log.timestamp
        state = apply_delta(db, is_entry=log_type == LogType.ENTRY)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[SCAN] Persistence failure: {e}", exc_info=True)
        raise InternalError("Failed to record scan") from e

    logger.info(f"[SCAN] {log_type.value} {user_name} → "
                f"{state.current_occupancy}/{state.max_capacity}")
    return ScanRecord(log_type, user_id, user_name, timestamp, state)


async def handle_scan(db: Session, qr_code: str, gateway) -> ScanOutcome:
    # Session work stays off the event loop so sockets keep flowing during a scan
    record = await run_in_threadpool(record_scan, db, qr_code)
    state = record.state

    await publish_scan_events(SafeGateway(gateway), record.log_type, record.user_id,
                              record.user_name, record.timestamp, state)

    return ScanOutcome(
        type=record.log_type,
        current_occupancy=state.current_occupancy,
        max_capacity=state.max_capacity,
        is_at_capacity=state.is_at_capacity,
        user_name=record.user_name,
        timestamp=record.timestamp,
    )


async def publish_scan_events(gateway, log_type: LogType, user_id: str, user_name: str,
                              timestamp, state):
    status = build_occupancy_status(state)
    await gateway.broadcast_global(EVENT_OCCUPANCY_UPDATE, to_payload(status))

    alert = build_alert(status)
    if alert:
        logger.warning(f"[ALERT][{alert.type}] {alert.message} "
                       f"({status.current_occupancy}/{status.max_capacity})")
        await gateway.broadcast_global(EVENT_OCCUPANCY_ALERT, to_payload(alert))

    action = build_user_action(log_type, user_name, user_id, timestamp, state)
    await gateway.send_to_user(user_id, EVENT_USER_ACTION, to_payload(action))
