# app/schemas/scan.py
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from app.models.entry_exit_log import LogType
from app.schemas.types import UTCDateTime


class ScanRequest(BaseModel):
    qr_code: str = Field(min_length=1)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class ScanOutcome(BaseModel):
    success: bool = True
    type: LogType
    current_occupancy: int
    max_capacity: int
    is_at_capacity: bool
    user_name: str
    timestamp: UTCDateTime

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class UserActionOut(BaseModel):
    """Payload of the user:action event sent to the scanning user only."""
    type: LogType
    user_name: str
    user_id: str
    timestamp: UTCDateTime
    current_occupancy: int
    max_capacity: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True
