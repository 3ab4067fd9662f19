# app/schemas/entry_exit_log.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from app.models.entry_exit_log import LogType
from app.schemas.types import UTCDateTime


class EntryExitLogOut(BaseModel):
    id: int
    user_id: str
    type: LogType
    timestamp: UTCDateTime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True

class DailyCountOut(BaseModel):
    date: str
    entries: int
    exits: int
