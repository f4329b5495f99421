from sqlalchemy import Column, Integer, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.sql import func, false

from ..core.database import Base

class Slot(Base):
    __tablename__ = "doctor_slots"
    __table_args__ = (
        # A doctor cannot publish two slots for the same instant
        UniqueConstraint("doctor_id", "scheduled_time", name="ux_doctor_slot"),
    )

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    scheduled_time = Column(DateTime, nullable=False)

    # Flipped only by the booking coordinator
    is_booked = Column(Boolean, nullable=False, default=False, server_default=false())

    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Slot(id={self.id}, doctor_id={self.doctor_id}, time='{self.scheduled_time}', booked={self.is_booked})>"
