from sqlalchemy.orm import Session, aliased
from sqlalchemy import select, delete
from datetime import datetime
from typing import List, Optional

from ..models.appointment import Appointment, AppointmentStatus
from ..models.user import User


class AppointmentService:
    """Persistence for appointment rows.

    Writes are flushed, never committed, so they join the caller's
    transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, patient_id: int, doctor_id: int, scheduled_time: datetime) -> Appointment:
        """Insert an appointment; raises IntegrityError if the doctor is already taken at that time."""
        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            scheduled_time=scheduled_time,
            status=AppointmentStatus.BOOKED.value
        )
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def find(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.get(Appointment, appointment_id)

    def delete(
        self,
        appointment_id: int,
        patient_id: int,
        doctor_id: int,
        scheduled_time: datetime
    ) -> bool:
        """Delete the appointment only if it still matches the given row.

        Returns False when nothing matched, e.g. the appointment was
        canceled already or its id now belongs to another booking.
        """
        result = self.db.execute(
            delete(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.patient_id == patient_id,
                Appointment.doctor_id == doctor_id,
                Appointment.scheduled_time == scheduled_time
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    def list_for_doctor(self, doctor_id: int) -> List[dict]:
        return self._list(Appointment.doctor_id == doctor_id)

    def list_for_patient(self, patient_id: int) -> List[dict]:
        return self._list(Appointment.patient_id == patient_id)

    def _list(self, criterion) -> List[dict]:
        """Newest first, with both parties' name and phone attached."""
        patient = aliased(User)
        doctor = aliased(User)
        rows = self.db.execute(
            select(
                Appointment.id,
                Appointment.patient_id,
                patient.name.label("patient_name"),
                patient.phone_number.label("patient_phone"),
                Appointment.doctor_id,
                doctor.name.label("doctor_name"),
                doctor.phone_number.label("doctor_phone"),
                Appointment.scheduled_time,
                Appointment.status,
                Appointment.created_at,
            )
            .select_from(Appointment)
            .outerjoin(patient, patient.id == Appointment.patient_id)
            .outerjoin(doctor, doctor.id == Appointment.doctor_id)
            .where(criterion)
            .order_by(Appointment.scheduled_time.desc(), Appointment.id.desc())
        )
        return [dict(row._mapping) for row in rows]
