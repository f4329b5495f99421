from datetime import datetime, timedelta

import pytest

from app.core.database import transaction
from app.core.exceptions import ConflictError, InternalError, InvalidInputError, NotFoundError
from app.models.slot import Slot
from app.services.slot_service import SlotService, parse_slot_times


class TestParseSlotTimes:

    def test_parses_and_deduplicates(self):
        times = parse_slot_times([
            "2099-01-05 09:00:00",
            "2099-01-05 09:30:00",
            "2099-01-05 09:00:00",
        ])
        assert times == {datetime(2099, 1, 5, 9, 0), datetime(2099, 1, 5, 9, 30)}

    @pytest.mark.parametrize("value", [
        "2099-01-05T09:00:00",
        "2099-01-05 09:00",
        "05/01/2099 09:00:00",
        "2099-13-05 09:00:00",
        "2099-02-30 09:00:00",
        "",
    ])
    def test_rejects_malformed_timestamps(self, value):
        with pytest.raises(InvalidInputError):
            parse_slot_times([value])

    def test_rejects_non_string_entries(self):
        with pytest.raises(InvalidInputError):
            parse_slot_times([20990105])

    def test_rejects_empty_list(self):
        with pytest.raises(InvalidInputError):
            parse_slot_times([])


class TestSlotService:

    def publish(self, db, doctor_id, *values):
        with transaction(db):
            return SlotService(db).publish_slots(doctor_id, parse_slot_times(values))

    def test_publish_inserts_each_time_once(self, db, doctor):
        assert self.publish(db, doctor.id, "2099-01-05 09:00:00", "2099-01-05 09:30:00") == 2
        assert self.publish(db, doctor.id, "2099-01-05 09:00:00") == 0
        assert self.publish(db, doctor.id, "2099-01-05 09:30:00", "2099-01-05 10:00:00") == 1

        assert len(SlotService(db).list_slots(doctor.id)) == 3

    def test_same_time_allowed_for_different_doctors(self, db, doctor, other_doctor):
        assert self.publish(db, doctor.id, "2099-01-05 09:00:00") == 1
        assert self.publish(db, other_doctor.id, "2099-01-05 09:00:00") == 1

    def test_list_future_slots_skips_past_and_sorts_ascending(self, db, doctor, other_doctor):
        past = (datetime.now() - timedelta(days=1)).strftime("%Y-%m-%d %H:%M:%S")
        self.publish(db, doctor.id, "2099-01-06 09:00:00", past, "2099-01-05 09:00:00")
        self.publish(db, other_doctor.id, "2099-01-04 09:00:00")

        slots = SlotService(db).list_future_slots(doctor.id)

        assert [slot.scheduled_time for slot in slots] == [
            datetime(2099, 1, 5, 9, 0),
            datetime(2099, 1, 6, 9, 0),
        ]

    def test_list_slots_includes_past(self, db, doctor):
        self.publish(db, doctor.id, "2020-01-05 09:00:00", "2099-01-05 09:00:00")

        slots = SlotService(db).list_slots(doctor.id)

        assert [slot.scheduled_time.year for slot in slots] == [2020, 2099]

    def test_try_claim_succeeds_only_once(self, db, doctor):
        self.publish(db, doctor.id, "2099-01-05 09:00:00")
        slot_id = SlotService(db).list_slots(doctor.id)[0].id

        with transaction(db):
            assert SlotService(db).try_claim(slot_id) is True
        with transaction(db):
            assert SlotService(db).try_claim(slot_id) is False

        assert db.get(Slot, slot_id).is_booked is True

    def test_try_claim_unknown_slot(self, db):
        with transaction(db):
            assert SlotService(db).try_claim(4242) is False

    def test_release_by_doctor_and_time(self, db, doctor):
        self.publish(db, doctor.id, "2099-01-05 09:00:00")
        slot_id = SlotService(db).list_slots(doctor.id)[0].id
        with transaction(db):
            SlotService(db).try_claim(slot_id)

        with transaction(db):
            assert SlotService(db).release(doctor.id, datetime(2099, 1, 5, 9, 0)) is True

        assert db.get(Slot, slot_id).is_booked is False

    def test_release_without_matching_slot(self, db, doctor):
        with transaction(db):
            assert SlotService(db).release(doctor.id, datetime(2099, 1, 5, 9, 0)) is False

    def test_delete_free_slot(self, db, doctor):
        self.publish(db, doctor.id, "2099-01-05 09:00:00")
        slot_id = SlotService(db).list_slots(doctor.id)[0].id

        with transaction(db):
            SlotService(db).delete_if_free(doctor.id, slot_id)

        assert SlotService(db).list_slots(doctor.id) == []

    def test_delete_booked_slot_conflicts(self, db, doctor):
        self.publish(db, doctor.id, "2099-01-05 09:00:00")
        slot_id = SlotService(db).list_slots(doctor.id)[0].id
        with transaction(db):
            SlotService(db).try_claim(slot_id)

        with pytest.raises(ConflictError):
            with transaction(db):
                SlotService(db).delete_if_free(doctor.id, slot_id)

        slot = db.get(Slot, slot_id)
        assert slot is not None
        assert slot.is_booked is True

    def test_delete_other_doctors_slot_not_found(self, db, doctor, other_doctor):
        self.publish(db, doctor.id, "2099-01-05 09:00:00")
        slot_id = SlotService(db).list_slots(doctor.id)[0].id

        with pytest.raises(NotFoundError):
            with transaction(db):
                SlotService(db).delete_if_free(other_doctor.id, slot_id)

        assert len(SlotService(db).list_slots(doctor.id)) == 1

    def test_publish_on_unsupported_database(self, db, doctor, monkeypatch):
        monkeypatch.setattr(db.get_bind().dialect, "name", "oracle")

        with pytest.raises(InternalError):
            SlotService(db).publish_slots(doctor.id, parse_slot_times(["2099-01-05 09:00:00"]))

        monkeypatch.undo()
        assert SlotService(db).list_slots(doctor.id) == []
