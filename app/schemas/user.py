# app/schemas/user.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from app.models.user import UserRole


class UserOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class QRCodeOut(BaseModel):
    message: str = "QR code retrieved successfully"
    qr_code: str
    user: UserOut

    class Config:
        alias_generator = to_camel
        populate_by_name = True
