# app/models/user.py
"""
Users table — people who can pass the entry/exit points.
Each user carries a unique QR code token issued by the user-management side.
Used by user_service to resolve a scanned QR code to a person.
"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum
from app.database import Base


class UserRole(str, enum.Enum):
    STUDENT = "STUDENT"
    STAFF = "STAFF"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(Enum(UserRole), default=UserRole.STUDENT, nullable=False)
    qr_code = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User {self.id} email={self.email} role={self.role}>"
