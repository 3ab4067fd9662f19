# app/services/notification_service.py
"""
Builds the real-time event payloads from an occupancy snapshot.
Pure functions with no DB or socket access. broadcast_service delivers them.
"""

import math
from typing import Optional
from app.models.entry_exit_log import LogType
from app.schemas.occupancy import OccupancyStatusOut, OccupancyAlertOut
from app.schemas.scan import UserActionOut
from app.config import settings

EVENT_OCCUPANCY_UPDATE = "occupancy:update"
EVENT_OCCUPANCY_ALERT = "occupancy:alert"
EVENT_USER_ACTION = "user:action"

ALERT_FULL = "FULL"
ALERT_WARNING = "WARNING"


def calculate_percentage(current_occupancy: int, max_capacity: int) -> int:
    """Whole-number percentage, halves rounded up (12.5 → 13)."""
    if max_capacity <= 0:
        return 100
    return int(math.floor(current_occupancy / max_capacity * 100 + 0.5))


def build_occupancy_status(state) -> OccupancyStatusOut:
    """state: anything with current_occupancy, max_capacity, updated_at."""
    percentage = calculate_percentage(state.current_occupancy, state.max_capacity)
    return OccupancyStatusOut(
        current_occupancy=state.current_occupancy,
        max_capacity=state.max_capacity,
        percentage=percentage,
        is_available=state.current_occupancy < state.max_capacity,
        is_near_capacity=percentage >= settings.NEAR_CAPACITY_PERCENT,
        is_at_capacity=state.current_occupancy >= state.max_capacity,
        last_updated=state.updated_at,
    )


def build_alert(status: OccupancyStatusOut) -> Optional[OccupancyAlertOut]:
    """FULL beats WARNING; None when neither threshold is reached."""
    if status.is_at_capacity:
        alert_type, message = ALERT_FULL, f"{settings.FACILITY_NAME} is at maximum capacity!"
    elif status.is_near_capacity:
        alert_type, message = ALERT_WARNING, f"{settings.FACILITY_NAME} is nearly full!"
    else:
        return None
    return OccupancyAlertOut(type=alert_type, message=message, **status.model_dump())


def build_user_action(log_type: LogType, user_name: str, user_id: str,
                      timestamp, state) -> UserActionOut:
    return UserActionOut(
        type=log_type,
        user_name=user_name,
        user_id=user_id,
        timestamp=timestamp,
        current_occupancy=state.current_occupancy,
        max_capacity=state.max_capacity,
    )


def to_payload(model) -> dict:
    """camelCase, JSON-safe dict as sent over the wire."""
    return model.model_dump(by_alias=True, mode="json")
