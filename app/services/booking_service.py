from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from ..core.database import transaction
from ..core.exceptions import (
    BookingError, NotFoundError, ConflictError, ForbiddenError, InternalError
)
from ..core.security import UserRole
from ..models.appointment import Appointment
from .slot_service import SlotService
from .appointment_service import AppointmentService

logger = logging.getLogger(__name__)


class BookingService:
    """Turns doctor slots into appointments and back.

    This is the only code allowed to flip ``Slot.is_booked`` or to insert
    and delete appointment rows. Every claim and every cancellation runs in
    a single transaction so that, once committed, a slot is booked exactly
    when one appointment exists for its (doctor_id, scheduled_time).
    """

    def __init__(self, db: Session):
        self.db = db
        self.slots = SlotService(db)
        self.appointments = AppointmentService(db)

    def claim_slot(self, patient_id: int, slot_id: int) -> Appointment:
        """Book a slot for a patient and return the new appointment."""
        slot = self.slots.get(slot_id)
        if not slot:
            raise NotFoundError("Slot not found")

        # Cheap early exit; try_claim below is what actually decides
        if slot.is_booked:
            raise ConflictError("Slot already booked")

        doctor_id = slot.doctor_id
        scheduled_time = slot.scheduled_time

        try:
            with transaction(self.db):
                if not self.slots.try_claim(slot_id):
                    logger.info(f"Patient {patient_id} lost the race for slot {slot_id}")
                    raise ConflictError("Slot already booked (race)")

                appointment = self.appointments.create(patient_id, doctor_id, scheduled_time)
                appointment_id = appointment.id
        except BookingError:
            raise
        except IntegrityError as exc:
            logger.warning(
                f"Appointment for doctor {doctor_id} at {scheduled_time} already exists: {exc.orig}"
            )
            raise ConflictError("Doctor already has an appointment at this time") from exc
        except SQLAlchemyError as exc:
            logger.exception(f"Booking transaction for slot {slot_id} failed")
            raise InternalError("Failed to book slot") from exc

        logger.info(
            f"Slot {slot_id} booked by patient {patient_id} as appointment {appointment_id}"
        )
        return self.appointments.find(appointment_id)

    def cancel_appointment(self, caller_id: int, caller_role: UserRole, appointment_id: int) -> None:
        """Delete an appointment and free the slot it came from."""
        appointment = self.appointments.find(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        try:
            role = UserRole(caller_role)
        except ValueError:
            raise ForbiddenError("Not authorized to cancel this appointment")

        is_patient = role == UserRole.PATIENT and appointment.patient_id == caller_id
        is_doctor = role == UserRole.DOCTOR and appointment.doctor_id == caller_id
        if not is_patient and not is_doctor:
            raise ForbiddenError("Not authorized to cancel this appointment")

        patient_id = appointment.patient_id
        doctor_id = appointment.doctor_id
        scheduled_time = appointment.scheduled_time

        try:
            with transaction(self.db):
                # Only the row that was authorized above; it may be gone already
                if not self.appointments.delete(appointment_id, patient_id, doctor_id, scheduled_time):
                    raise NotFoundError("Appointment not found")
                # The slot may have been removed since; that is not an error
                released = self.slots.release(doctor_id, scheduled_time)
        except BookingError:
            raise
        except SQLAlchemyError as exc:
            logger.exception(f"Cancellation of appointment {appointment_id} failed")
            raise InternalError("Failed to cancel appointment") from exc

        logger.info(
            f"Appointment {appointment_id} canceled by {role.value} {caller_id}"
            f" (slot released: {released})"
        )
