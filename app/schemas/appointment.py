from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AppointmentCreate(BaseModel):
    slot_id: int = Field(..., gt=0)


class AppointmentCreatedResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    scheduled_time: datetime
    slot_id: int


class AppointmentListItem(BaseModel):
    """Appointment row joined with the names and phones of both parties."""
    id: int
    patient_id: int
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    doctor_id: int
    doctor_name: Optional[str] = None
    doctor_phone: Optional[str] = None
    scheduled_time: datetime
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
