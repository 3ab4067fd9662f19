# app/routers/qr.py
"""QR code endpoints used by members and scanner kiosks."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user_id
from app.schemas.scan import ScanRequest, ScanOutcome
from app.schemas.user import QRCodeOut
from app.schemas.occupancy import OccupancyStatusOut
from app.services.broadcast_service import get_gateway
from app.services.scan_service import handle_scan
from app.services.user_service import get_my_qr_code
from app.services.occupancy_service import get_occupancy_status

router = APIRouter()


@router.get("/qr/me", response_model=QRCodeOut, summary="Current user's QR code")
def get_my_qr(user_id: Optional[str] = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return get_my_qr_code(db, user_id)


@router.post("/qr/scan", response_model=ScanOutcome, summary="Scan a QR code at an entry/exit point")
async def scan_qr(body: ScanRequest, db: Session = Depends(get_db), gateway=Depends(get_gateway)):
    """
    Records an ENTRY or EXIT for the QR code owner and updates occupancy.
    404 unknown QR code · 403 entry refused, facility full.
    """
    return await handle_scan(db, body.qr_code, gateway)


@router.get("/qr/occupancy", response_model=OccupancyStatusOut, summary="Current occupancy")
def get_occupancy(db: Session = Depends(get_db)):
    return get_occupancy_status(db)
