# app/schemas/occupancy.py
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Literal
from app.schemas.types import UTCDateTime


class OccupancyStatusOut(BaseModel):
    current_occupancy: int
    max_capacity: int
    percentage: int
    is_available: bool
    is_near_capacity: bool
    is_at_capacity: bool
    last_updated: UTCDateTime

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class OccupancyAlertOut(OccupancyStatusOut):
    type: Literal["FULL", "WARNING"]
    message: str

class CapacityUpdate(BaseModel):
    max_capacity: int = Field(gt=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True

class ResetSummaryOut(BaseModel):
    deleted_logs: int
    previous_occupancy: int
    current_occupancy: int
    max_capacity: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True
