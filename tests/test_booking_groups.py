import threading
import uuid
from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import InvalidSlotRange, NotFoundError, PermissionDeniedError, SlotConflict
from app.db.base import Base
from app.models.booking import Booking
from app.models.user import Role
from app.utils import booking_groups
from app.utils.booking_groups import cancel, group_bookings, reserve

from conftest import principal_for

DAY = date(2026, 10, 19)


@pytest.fixture
def setup(make_tenant, make_user, make_room):
    tenant = make_tenant()
    member = make_user(tenant, 1001)
    other = make_user(tenant, 1002)
    admin = make_user(tenant, 1003, role=Role.ADMIN)
    room = make_room(tenant)
    return tenant, member, other, admin, room


def _slots(db, room_id, day=DAY):
    rows = db.query(Booking.slot_index).filter(
        Booking.room_id == room_id, Booking.booking_date == day
    ).all()
    return sorted(r[0] for r in rows)


class TestReserve:
    def test_non_overlapping_ranges_all_succeed(self, db, setup):
        _, member, other, _, room = setup
        requests = [(0, 3, member), (4, 4, other), (10, 20, member), (95, 95, other)]

        for start, end, user in requests:
            result = reserve(db, room.id, DAY, start, end, user.id)
            assert result.created_count == end - start + 1

        expected = sorted(s for start, end, _ in requests for s in range(start, end + 1))
        assert _slots(db, room.id) == expected

    def test_all_slots_share_one_group(self, db, setup):
        _, member, _, _, room = setup
        result = reserve(db, room.id, DAY, 10, 13, member.id)

        rows = db.query(Booking).filter(Booking.room_id == room.id).all()
        assert len(rows) == 4
        assert {r.group_id for r in rows} == {result.group_id}
        assert {r.user_id for r in rows} == {member.id}

    def test_overlap_reports_lowest_conflicting_slot(self, db, setup):
        _, member, other, _, room = setup
        reserve(db, room.id, DAY, 20, 25, member.id)

        with pytest.raises(SlotConflict) as exc_info:
            reserve(db, room.id, DAY, 18, 30, other.id)

        assert exc_info.value.slot == 20
        assert _slots(db, room.id) == list(range(20, 26))

    def test_overlap_at_tail(self, db, setup):
        _, member, other, _, room = setup
        reserve(db, room.id, DAY, 20, 25, member.id)

        with pytest.raises(SlotConflict) as exc_info:
            reserve(db, room.id, DAY, 25, 27, other.id)
        assert exc_info.value.slot == 25

    def test_same_slots_on_other_date_or_room_are_independent(self, db, setup, make_room):
        tenant, member, other, _, room = setup
        second_room = make_room(tenant, name="Green")
        reserve(db, room.id, DAY, 10, 12, member.id)

        reserve(db, room.id, date(2026, 10, 20), 10, 12, other.id)
        reserve(db, second_room.id, DAY, 10, 12, other.id)

        assert _slots(db, second_room.id) == [10, 11, 12]

    @pytest.mark.parametrize("start,end", [(-1, 3), (0, 96), (10, 9), (96, 96)])
    def test_invalid_range_rejected_before_touching_db(self, start, end):
        db = MagicMock()
        with pytest.raises(InvalidSlotRange):
            reserve(db, uuid.uuid4(), DAY, start, end, uuid.uuid4())
        assert db.method_calls == []

    def test_race_on_commit_maps_to_conflict(self, db, setup, monkeypatch):
        """
        Simulate a second request that read the grid before the first one
        committed: its snapshot says free, the unique constraint says no.
        """
        _, member, other, _, room = setup
        reserve(db, room.id, DAY, 40, 40, member.id)

        real_load_grid = booking_groups.load_grid
        calls = []

        def stale_then_real(*args, **kwargs):
            calls.append(1)
            if len(calls) == 1:
                return [False] * 96
            return real_load_grid(*args, **kwargs)

        monkeypatch.setattr(booking_groups, "load_grid", stale_then_real)

        with pytest.raises(SlotConflict) as exc_info:
            reserve(db, room.id, DAY, 39, 41, other.id)

        assert exc_info.value.slot == 40
        rows = db.query(Booking).filter(Booking.room_id == room.id).all()
        assert [(r.slot_index, r.user_id) for r in rows] == [(40, member.id)]


def test_concurrent_reservations_of_one_slot(tmp_path, monkeypatch):
    """
    Two threads with their own connections both read an empty grid, then
    race to insert slot 7. Exactly one wins; the other sees a conflict.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path}/race.db",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    # SQLite does not enforce the foreign keys, so bare ids are enough here
    room_id = uuid.uuid4()

    real_load_grid = booking_groups.load_grid
    both_read = threading.Barrier(2, timeout=10)
    seen = threading.local()

    def load_then_wait(*args, **kwargs):
        grid = real_load_grid(*args, **kwargs)
        if not getattr(seen, "waited", False):
            seen.waited = True
            both_read.wait()
        return grid

    monkeypatch.setattr(booking_groups, "load_grid", load_then_wait)

    results = []

    def worker():
        session = Session()
        try:
            results.append(reserve(session, room_id, DAY, 7, 7, uuid.uuid4()))
        except SlotConflict as exc:
            results.append(("conflict", exc.slot))
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    try:
        assert len(results) == 2
        assert sum(isinstance(r, booking_groups.Reservation) for r in results) == 1
        assert ("conflict", 7) in results

        session = Session()
        try:
            assert session.query(Booking).filter(Booking.room_id == room_id).count() == 1
        finally:
            session.close()
    finally:
        engine.dispose()


class TestCancel:
    def test_cancel_any_member_removes_whole_group_only(self, db, setup):
        _, member, _, _, room = setup
        reserve(db, room.id, DAY, 5, 6, member.id)
        target = reserve(db, room.id, DAY, 10, 13, member.id)
        reserve(db, room.id, DAY, 14, 14, member.id)

        middle = db.query(Booking).filter(
            Booking.group_id == target.group_id, Booking.slot_index == 12
        ).one()

        removed = cancel(db, middle.id, principal_for(member))

        assert removed == 4
        assert _slots(db, room.id) == [5, 6, 14]

    def test_cancel_singleton_booking(self, db, setup, add_bookings):
        _, member, _, _, room = setup
        ids = add_bookings(room, member, DAY, [30, 31])

        assert cancel(db, ids[0], principal_for(member)) == 1
        assert _slots(db, room.id) == [31]

    def test_other_member_cannot_cancel(self, db, setup):
        _, member, other, _, room = setup
        reserve(db, room.id, DAY, 10, 11, member.id)
        booking_id = db.query(Booking.id).filter(Booking.room_id == room.id).first()[0]

        with pytest.raises(PermissionDeniedError):
            cancel(db, booking_id, principal_for(other))
        assert _slots(db, room.id) == [10, 11]

    def test_admin_can_cancel_any_booking_in_tenant(self, db, setup):
        _, member, _, admin, room = setup
        reserve(db, room.id, DAY, 10, 11, member.id)
        booking_id = db.query(Booking.id).filter(Booking.room_id == room.id).first()[0]

        assert cancel(db, booking_id, principal_for(admin)) == 2
        assert _slots(db, room.id) == []

    def test_unknown_booking_not_found(self, db, setup):
        _, member, _, _, _ = setup
        with pytest.raises(NotFoundError):
            cancel(db, uuid.uuid4(), principal_for(member))

    def test_other_tenant_booking_not_found(self, db, setup, make_tenant, make_user):
        _, member, _, _, room = setup
        reserve(db, room.id, DAY, 10, 11, member.id)
        booking_id = db.query(Booking.id).filter(Booking.room_id == room.id).first()[0]

        outsider = make_user(make_tenant("Globex"), 2001, role=Role.ADMIN)
        with pytest.raises(NotFoundError):
            cancel(db, booking_id, principal_for(outsider))
        assert _slots(db, room.id) == [10, 11]


def test_group_bookings_folds_and_orders(db, setup, add_bookings):
    _, member, _, _, room = setup
    first = reserve(db, room.id, DAY, 20, 22, member.id)
    later = reserve(db, room.id, date(2026, 10, 21), 4, 5, member.id)
    loose = add_bookings(room, member, DAY, [2])

    groups = group_bookings(db.query(Booking).all())

    assert [g.group_id for g in groups] == [later.group_id, loose[0], first.group_id]
    assert groups[0].slots == [4, 5]
    assert (groups[2].start_slot, groups[2].end_slot) == (20, 22)
    assert groups[2].room_name == room.name
    assert groups[2].user_name == member.name
