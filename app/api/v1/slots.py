from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db, transaction
from ...core.exceptions import NotFoundError
from ...core.security import Identity, UserRole
from ...api.deps import get_doctor_identity, get_patient_identity
from ...services.slot_service import SlotService, parse_slot_times
from ...schemas.slot import SlotPublishRequest, SlotPublishResponse, SlotResponse
from ...schemas.appointment import MessageResponse
from ...models.user import User

router = APIRouter(tags=["Slots"])

@router.post(
    "/doctor/slots",
    response_model=SlotPublishResponse,
    status_code=status.HTTP_201_CREATED
)
async def publish_slots(
    slot_data: SlotPublishRequest,
    db: Session = Depends(get_db),
    doctor: Identity = Depends(get_doctor_identity)
):
    """Publish availability; times already published are skipped."""
    times = parse_slot_times(slot_data.slots)

    with transaction(db):
        inserted = SlotService(db).publish_slots(doctor.user_id, times)

    return SlotPublishResponse(inserted=inserted)

@router.get("/doctor/slots", response_model=List[SlotResponse])
async def list_own_slots(
    db: Session = Depends(get_db),
    doctor: Identity = Depends(get_doctor_identity)
):
    """List every slot the calling doctor has published."""
    slots = SlotService(db).list_slots(doctor.user_id)
    return [SlotResponse.model_validate(slot) for slot in slots]

@router.delete("/doctor/slots/{slot_id}", response_model=MessageResponse)
async def delete_slot(
    slot_id: int,
    db: Session = Depends(get_db),
    doctor: Identity = Depends(get_doctor_identity)
):
    """Delete one of the calling doctor's slots unless it is booked."""
    with transaction(db):
        SlotService(db).delete_if_free(doctor.user_id, slot_id)

    return {"message": "Slot deleted"}

@router.get("/doctors/{doctor_id}/slots", response_model=List[SlotResponse])
async def list_doctor_slots(
    doctor_id: int,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_patient_identity)
):
    """List a doctor's upcoming slots for patients to pick from."""
    doctor = db.scalar(
        select(User).where(User.id == doctor_id, User.role == UserRole.DOCTOR)
    )
    if not doctor:
        raise NotFoundError("Doctor not found")

    slots = SlotService(db).list_future_slots(doctor_id)
    return [SlotResponse.model_validate(slot) for slot in slots]
