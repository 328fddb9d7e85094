from datetime import date, time, timedelta

import pytest

from therapy_backend.core.exceptions import ScheduleNotFoundError, ScheduleStateError
from therapy_backend.models.schedule import TherapistSchedule
from therapy_backend.repositories.schedule_repository import CANNOT_DELETE_MESSAGE, ScheduleRepository


@pytest.fixture
def repository(db) -> ScheduleRepository:
    return ScheduleRepository(db)


def test_list_defaults_to_today_and_orders_by_date_then_id(repository, therapist, other_therapist, add_slot) -> None:
    today = date.today()
    add_slot(therapist, today - timedelta(days=1))
    later = add_slot(therapist, today + timedelta(days=2))
    first = add_slot(therapist, today, start=time(10, 0), end=time(10, 30))
    second = add_slot(therapist, today, start=time(9, 0), end=time(9, 30))
    add_slot(other_therapist, today)

    schedules = repository.list(therapist.id)

    assert [schedule.id for schedule in schedules] == [first.id, second.id, later.id]


def test_list_filters_from_given_date(repository, therapist, add_slot) -> None:
    add_slot(therapist, date(2024, 1, 1))
    kept = add_slot(therapist, date(2024, 1, 5))

    schedules = repository.list(therapist.id, date(2024, 1, 2))

    assert [schedule.id for schedule in schedules] == [kept.id]


def test_find_raises_when_missing(repository) -> None:
    with pytest.raises(ScheduleNotFoundError):
        repository.find(999)


def test_existing_windows_groups_ranges_by_date(repository, therapist, other_therapist, add_slot) -> None:
    add_slot(therapist, date(2024, 1, 1), start=time(9, 0), end=time(9, 30))
    add_slot(therapist, date(2024, 1, 1), start=time(13, 0), end=time(13, 45))
    add_slot(therapist, date(2024, 1, 10), start=time(9, 0), end=time(9, 30))
    add_slot(other_therapist, date(2024, 1, 2))

    windows = repository.existing_windows(therapist.id, date(2024, 1, 1), date(2024, 1, 7))

    assert {slot_date: sorted(ranges) for slot_date, ranges in windows.items()} == {
        date(2024, 1, 1): [(time(9, 0), time(9, 30)), (time(13, 0), time(13, 45))],
    }


@pytest.mark.parametrize('status', ['booked', 'cancelled'])
def test_delete_rejects_slot_that_is_not_open(db, repository, therapist, add_slot, status: str) -> None:
    slot = add_slot(therapist, date(2024, 1, 1), status=status)

    with pytest.raises(ScheduleStateError) as exception_info:
        repository.delete(slot.id, therapist.id)

    assert exception_info.value.message == CANNOT_DELETE_MESSAGE
    assert db.get(TherapistSchedule, slot.id) is not None


def test_delete_treats_other_therapists_slot_as_missing(db, repository, therapist, other_therapist, add_slot) -> None:
    slot = add_slot(other_therapist, date(2024, 1, 1))

    with pytest.raises(ScheduleNotFoundError):
        repository.delete(slot.id, therapist.id)

    assert db.get(TherapistSchedule, slot.id) is not None


def test_delete_removes_open_slot(db, repository, therapist, add_slot) -> None:
    slot = add_slot(therapist, date(2024, 1, 1))

    repository.delete(slot.id, therapist.id)
    db.commit()

    assert db.get(TherapistSchedule, slot.id) is None


def test_bulk_delete_only_removes_owned_open_slots(db, repository, therapist, other_therapist, add_slot) -> None:
    open_slot = add_slot(therapist, date(2024, 1, 1), start=time(9, 0))
    booked_slot = add_slot(therapist, date(2024, 1, 1), start=time(10, 0), status='booked')
    cancelled_slot = add_slot(therapist, date(2024, 1, 1), start=time(11, 0), status='cancelled')
    foreign_slot = add_slot(other_therapist, date(2024, 1, 1))

    deleted = repository.bulk_delete(
        [open_slot.id, booked_slot.id, cancelled_slot.id, foreign_slot.id, 999],
        therapist.id,
    )
    db.commit()

    remaining = {schedule.id for schedule in db.query(TherapistSchedule).all()}
    assert deleted == 1
    assert remaining == {booked_slot.id, cancelled_slot.id, foreign_slot.id}


def test_cancel_records_reason_and_status(db, repository, therapist, add_slot) -> None:
    slot = add_slot(therapist, date(2024, 1, 1))

    repository.cancel(slot.id, 'Conference', therapist.id)
    db.commit()
    db.refresh(slot)

    assert slot.status == 'cancelled'
    assert slot.cancel_reason == 'Conference'


def test_cancel_does_not_overwrite_existing_reason(db, repository, therapist, add_slot) -> None:
    slot = add_slot(therapist, date(2024, 1, 1))
    repository.cancel(slot.id, 'Conference', therapist.id)
    db.commit()

    with pytest.raises(ScheduleStateError):
        repository.cancel(slot.id, 'Changed my mind', therapist.id)

    db.refresh(slot)
    assert slot.cancel_reason == 'Conference'


def test_count_available_by_therapist_counts_open_future_slots(repository, therapist, other_therapist, add_slot) -> None:
    today = date.today()
    add_slot(therapist, today, start=time(9, 0))
    add_slot(therapist, today + timedelta(days=1), start=time(9, 0))
    add_slot(therapist, today + timedelta(days=1), start=time(10, 0), status='booked')
    add_slot(therapist, today - timedelta(days=1), start=time(9, 0))
    add_slot(other_therapist, today + timedelta(days=3), start=time(9, 0))

    rows = repository.count_available_by_therapist()

    assert rows == [
        {
            'id': therapist.id,
            'first_name': 'Tara',
            'last_name': 'Quinn',
            'phone': '555-0100',
            'profile_pic': 'tara.png',
            'total': 2,
        },
        {
            'id': other_therapist.id,
            'first_name': 'Omar',
            'last_name': 'Reyes',
            'phone': '555-0199',
            'profile_pic': None,
            'total': 1,
        },
    ]
    assert [row['id'] for row in repository.count_available_by_therapist(other_therapist.id)] == [other_therapist.id]
