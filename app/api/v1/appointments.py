from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import Identity
from ...api.deps import get_current_identity, get_doctor_identity, get_patient_identity
from ...services.booking_service import BookingService
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentCreatedResponse, AppointmentListItem, MessageResponse
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post(
    "",
    response_model=AppointmentCreatedResponse,
    status_code=status.HTTP_201_CREATED
)
async def book_appointment(
    booking: AppointmentCreate,
    db: Session = Depends(get_db),
    patient: Identity = Depends(get_patient_identity)
):
    """Book a doctor's slot for the calling patient."""
    appointment = BookingService(db).claim_slot(patient.user_id, booking.slot_id)

    return AppointmentCreatedResponse(
        id=appointment.id,
        patient_id=appointment.patient_id,
        doctor_id=appointment.doctor_id,
        scheduled_time=appointment.scheduled_time,
        slot_id=booking.slot_id
    )

@router.get("", response_model=List[AppointmentListItem])
async def list_doctor_appointments(
    db: Session = Depends(get_db),
    doctor: Identity = Depends(get_doctor_identity)
):
    """List the calling doctor's appointments, newest first."""
    return AppointmentService(db).list_for_doctor(doctor.user_id)

@router.get("/me", response_model=List[AppointmentListItem])
async def list_my_appointments(
    db: Session = Depends(get_db),
    patient: Identity = Depends(get_patient_identity)
):
    """List the calling patient's appointments, newest first."""
    return AppointmentService(db).list_for_patient(patient.user_id)

@router.delete("/{appointment_id}", response_model=MessageResponse)
async def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity)
):
    """Cancel an appointment as its patient or its doctor; frees the slot."""
    BookingService(db).cancel_appointment(identity.user_id, identity.role, appointment_id)

    return {"message": "Appointment canceled"}
