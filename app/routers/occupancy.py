# app/routers/occupancy.py
"""Occupancy — read + capacity management + maintenance reset endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.occupancy import OccupancyStatusOut, CapacityUpdate, ResetSummaryOut
from app.services.broadcast_service import get_gateway, SafeGateway
from app.services.notification_service import (
    EVENT_OCCUPANCY_UPDATE, build_occupancy_status, to_payload,
)
from app.services.occupancy_service import get_occupancy_status, set_capacity, read_occupancy
from app.services.maintenance_service import reset_data

router = APIRouter()


@router.get("/occupancy", response_model=OccupancyStatusOut)
def get_facility_occupancy(db: Session = Depends(get_db)):
    """Current occupancy, percentage and availability flags."""
    return get_occupancy_status(db)


@router.put("/occupancy/capacity", response_model=OccupancyStatusOut, summary="Set max capacity")
async def update_capacity(body: CapacityUpdate, db: Session = Depends(get_db),
                          gateway=Depends(get_gateway)):
    """Update the maximum capacity. Connected clients get a fresh occupancy:update."""
    status = build_occupancy_status(set_capacity(db, body.max_capacity))
    await SafeGateway(gateway).broadcast_global(EVENT_OCCUPANCY_UPDATE, to_payload(status))
    return status


@router.post("/occupancy/reset", response_model=ResetSummaryOut, summary="Clear logs, zero occupancy")
async def reset_occupancy(db: Session = Depends(get_db), gateway=Depends(get_gateway)):
    """Maintenance only. Deletes every entry/exit log and resets the counter to 0."""
    summary = reset_data(db)
    status = build_occupancy_status(read_occupancy(db))
    await SafeGateway(gateway).broadcast_global(EVENT_OCCUPANCY_UPDATE, to_payload(status))
    return summary
