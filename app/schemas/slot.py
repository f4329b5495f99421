from datetime import datetime
from typing import List
from pydantic import BaseModel, Field


class SlotPublishRequest(BaseModel):
    # Each entry is "YYYY-MM-DD HH:MM:SS"; checked by the slot service
    slots: List[str]


class SlotPublishResponse(BaseModel):
    inserted: int


class SlotResponse(BaseModel):
    slot_id: int = Field(validation_alias="id")
    scheduled_time: datetime
    is_booked: bool

    class Config:
        from_attributes = True
        populate_by_name = True
