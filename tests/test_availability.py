from datetime import date, datetime, timedelta, timezone

import pytest

from app.api import deps
from app.core.config import settings
from app.utils.availability import available_now, room_availability

DAY = date(2026, 10, 19)
AT_SLOT_40 = datetime(2026, 10, 19, 10, 7, 30)


@pytest.fixture
def tenant(make_tenant):
    return make_tenant()


@pytest.fixture
def member(tenant, make_user):
    return make_user(tenant, 1001, name="Ann")


def test_room_availability_annotates_busy_slots(db, tenant, member, make_room, add_bookings):
    room = make_room(tenant)
    add_bookings(room, member, DAY, [8, 9])
    add_bookings(room, member, DAY + timedelta(days=1), [10])

    result = room_availability(db, room, DAY)

    assert len(result.busy) == 96
    assert [i for i, busy in enumerate(result.busy) if busy] == [8, 9]
    assert [(s.slot, s.user_id, s.user_name) for s in result.busy_slots] == [
        (8, member.id, "Ann"),
        (9, member.id, "Ann"),
    ]


def test_available_now_skips_elapsed_and_booked_slots(db, tenant, member, make_room, add_bookings):
    room = make_room(tenant)
    add_bookings(room, member, DAY, [40, 41, 42])

    [summary] = available_now(db, tenant.id, AT_SLOT_40)

    assert summary.room_id == room.id
    assert summary.next_free_slot == 43
    assert min(summary.free_slots) == 43
    assert summary.free_slots == list(range(43, 96))


def test_available_now_omits_rooms_booked_for_rest_of_day(db, tenant, member, make_room, add_bookings):
    full = make_room(tenant, name="Alpha")
    open_room = make_room(tenant, name="Beta", capacity=12)
    add_bookings(full, member, DAY, range(40, 96))

    result = available_now(db, tenant.id, AT_SLOT_40)

    assert [r.room_id for r in result] == [open_room.id]
    assert result[0].capacity == 12
    assert result[0].next_free_slot == 40


def test_available_now_ignores_earlier_and_other_day_bookings(db, tenant, member, make_room, add_bookings):
    room = make_room(tenant)
    add_bookings(room, member, DAY, [0, 39])
    add_bookings(room, member, DAY + timedelta(days=1), [40])

    [summary] = available_now(db, tenant.id, AT_SLOT_40)
    assert summary.next_free_slot == 40


def test_available_now_empty_when_nothing_free(db, tenant, member, make_room, add_bookings):
    room = make_room(tenant)
    add_bookings(room, member, DAY, [95])

    assert available_now(db, tenant.id, datetime(2026, 10, 19, 23, 50)) == []


def test_available_now_scoped_to_tenant(db, tenant, make_tenant, make_room):
    make_room(make_tenant("Globex"), name="Theirs")
    mine = make_room(tenant, name="Mine")

    result = available_now(db, tenant.id, AT_SLOT_40)
    assert [r.room_id for r in result] == [mine.id]


def test_get_now_uses_reference_timezone(monkeypatch):
    monkeypatch.setattr(settings, "TIMEZONE", "Asia/Tashkent")
    now = deps.get_now()
    assert now.utcoffset() == timedelta(hours=5)

    utc_now = datetime.now(timezone.utc)
    assert abs(now - utc_now) < timedelta(minutes=1)
