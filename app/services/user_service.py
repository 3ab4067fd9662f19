# app/services/user_service.py
"""
User lookup helpers.
Users and their QR codes are issued elsewhere; this side only reads them.
"""

from typing import Optional
from sqlalchemy.orm import Session
from app.models.user import User
from app.schemas.user import QRCodeOut, UserOut
from app.exceptions import UnauthenticatedError, NotFoundError
from app.utils.logger import get_logger

logger = get_logger(__name__)


def find_user_by_qr_code(db: Session, qr_code: str) -> Optional[User]:
    """Find a user by scanned QR code. Returns None if not found."""
    return db.query(User).filter(User.qr_code == qr_code).first()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_my_qr_code(db: Session, user_id: Optional[str]) -> QRCodeOut:
    if not user_id:
        raise UnauthenticatedError("Missing caller identity")

    user = get_user(db, user_id)
    if not user:
        logger.warning(f"[QR] QR code requested for unknown user {user_id}")
        raise NotFoundError(f"No user with id {user_id}", error="User not found")

    return QRCodeOut(qr_code=user.qr_code, user=UserOut.model_validate(user))
