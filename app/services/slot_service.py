from sqlalchemy.orm import Session
from sqlalchemy import insert, update, delete, select
from sqlalchemy.dialects import postgresql, sqlite
from datetime import datetime
from typing import Iterable, List, Optional, Set
import logging
import re

from ..models.slot import Slot
from ..core.exceptions import NotFoundError, ConflictError, InvalidInputError, InternalError

logger = logging.getLogger(__name__)

SLOT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
SLOT_TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def parse_slot_times(values: Iterable[str]) -> Set[datetime]:
    """Parse "YYYY-MM-DD HH:MM:SS" strings into a set of datetimes.

    Raises InvalidInputError on the first malformed entry.
    """
    if isinstance(values, str):
        raise InvalidInputError("slots (array) required")

    times = set()
    for value in values:
        if not isinstance(value, str) or not SLOT_TIME_PATTERN.match(value):
            raise InvalidInputError(
                f'Invalid slot format: {value}. Use "YYYY-MM-DD HH:MM:SS"'
            )
        try:
            times.add(datetime.strptime(value, SLOT_TIME_FORMAT))
        except ValueError:
            raise InvalidInputError(f"Invalid slot time: {value}")

    if not times:
        raise InvalidInputError("slots (array) required")
    return times


class SlotService:
    """Persistence for doctor availability slots.

    Methods that write do not commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, slot_id: int) -> Optional[Slot]:
        return self.db.get(Slot, slot_id)

    def list_future_slots(self, doctor_id: int) -> List[Slot]:
        """Slots at or after the current time, earliest first."""
        return list(self.db.scalars(
            select(Slot)
            .where(Slot.doctor_id == doctor_id, Slot.scheduled_time >= datetime.now())
            .order_by(Slot.scheduled_time.asc())
        ))

    def list_slots(self, doctor_id: int) -> List[Slot]:
        """Every slot the doctor has published, earliest first."""
        return list(self.db.scalars(
            select(Slot)
            .where(Slot.doctor_id == doctor_id)
            .order_by(Slot.scheduled_time.asc())
        ))

    def publish_slots(self, doctor_id: int, times: Set[datetime]) -> int:
        """Insert one slot per time, skipping pairs that already exist.

        Returns the number of rows actually inserted.
        """
        stmt = self._insert_ignoring_duplicates()
        inserted = 0
        for scheduled_time in sorted(times):
            result = self.db.execute(
                stmt.values(doctor_id=doctor_id, scheduled_time=scheduled_time, is_booked=False)
            )
            inserted += max(result.rowcount, 0)

        logger.info(f"Doctor {doctor_id} published {inserted} of {len(times)} slots")
        return inserted

    def try_claim(self, slot_id: int) -> bool:
        """Flip a free slot to booked in one conditional update.

        Returns False when the slot is already booked or does not exist.
        """
        result = self.db.execute(
            update(Slot)
            .where(Slot.id == slot_id, Slot.is_booked.is_(False))
            .values(is_booked=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def release(self, doctor_id: int, scheduled_time: datetime) -> bool:
        """Mark the slot for (doctor_id, scheduled_time) free again."""
        result = self.db.execute(
            update(Slot)
            .where(Slot.doctor_id == doctor_id, Slot.scheduled_time == scheduled_time)
            .values(is_booked=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def delete_if_free(self, doctor_id: int, slot_id: int) -> None:
        """Delete one of the doctor's slots unless it is booked."""
        result = self.db.execute(
            delete(Slot)
            .where(
                Slot.id == slot_id,
                Slot.doctor_id == doctor_id,
                Slot.is_booked.is_(False)
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        slot = self.db.scalar(
            select(Slot).where(Slot.id == slot_id, Slot.doctor_id == doctor_id)
        )
        if not slot:
            raise NotFoundError("Slot not found")
        raise ConflictError("Cannot delete a booked slot")

    def _insert_ignoring_duplicates(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(Slot.__table__).on_conflict_do_nothing(
                index_elements=["doctor_id", "scheduled_time"]
            )
        if dialect == "sqlite":
            return sqlite.insert(Slot.__table__).on_conflict_do_nothing(
                index_elements=["doctor_id", "scheduled_time"]
            )
        if dialect in ("mysql", "mariadb"):
            return insert(Slot.__table__).prefix_with("IGNORE")
        logger.error(f"Idempotent slot publish is not supported on {dialect}")
        raise InternalError(f"Slot publishing is not supported on {dialect}")
