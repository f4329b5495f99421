from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    BOOKED = "booked"

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # Mirrors ux_doctor_slot; also the key used to free the slot on cancel
        UniqueConstraint("doctor_id", "scheduled_time", name="ux_appt_doctor_time"),
        # Never hand a canceled appointment's id to a new booking
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Appointment details
    scheduled_time = Column(DateTime, nullable=False, index=True)
    status = Column(String(32), nullable=False, default=AppointmentStatus.BOOKED.value)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, time='{self.scheduled_time}')>"
