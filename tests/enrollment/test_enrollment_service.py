from __future__ import annotations

from academy_register.enrollment.model import Booking, Child
from academy_register.enrollment.service import EnrollmentSnapshotter
from tests.fakes import CLASS_ID, InMemoryBookings, InMemoryChildren, uid


def make_service(bookings, children=(), **kwargs):
    return EnrollmentSnapshotter(InMemoryBookings(bookings), InMemoryChildren(children), **kwargs)


def test_roster_keeps_only_active_bookings_once():
    service = make_service(
        [
            Booking(child_id=uid(12), class_id=CLASS_ID, status="active"),
            Booking(child_id=uid(11), class_id=CLASS_ID, status=" CONFIRMED "),
            Booking(child_id=uid(12), class_id=CLASS_ID, status="current"),
            Booking(child_id=uid(13), class_id=CLASS_ID, status="cancelled"),
            Booking(child_id=uid(14), class_id=CLASS_ID, status=None),
            Booking(child_id=uid(15), class_id=uid(2), status="active"),
        ]
    )

    snapshot = service.roster(CLASS_ID)

    assert snapshot.child_ids == (uid(11), uid(12))
    assert snapshot.count == 2
    assert uid(13) not in snapshot


def test_roster_can_be_narrowed_to_given_children():
    service = make_service(
        [
            Booking(child_id=uid(11), class_id=CLASS_ID, status="active"),
            Booking(child_id=uid(12), class_id=CLASS_ID, status="active"),
        ]
    )
    snapshot = service.roster(CLASS_ID, [uid(12), uid(99)])
    assert snapshot.child_ids == (uid(12),)


def test_roster_is_read_fresh_each_time():
    bookings = InMemoryBookings([Booking(child_id=uid(11), class_id=CLASS_ID, status="active")])
    service = EnrollmentSnapshotter(bookings, InMemoryChildren())

    assert service.roster(CLASS_ID).count == 1
    bookings.bookings.append(Booking(child_id=uid(12), class_id=CLASS_ID, status="active"))
    assert service.roster(CLASS_ID).count == 2
    assert bookings.calls == 2


def test_custom_active_statuses():
    service = make_service(
        [
            Booking(child_id=uid(11), class_id=CLASS_ID, status="paid"),
            Booking(child_id=uid(12), class_id=CLASS_ID, status="active"),
        ],
        active_statuses=("Paid",),
    )
    assert service.roster(CLASS_ID).child_ids == (uid(11),)


def test_counts_by_class_includes_empty_classes():
    service = make_service(
        [
            Booking(child_id=uid(11), class_id=CLASS_ID, status="active"),
            Booking(child_id=uid(11), class_id=CLASS_ID, status="confirmed"),
            Booking(child_id=uid(12), class_id=uid(2), status="active"),
        ]
    )
    assert service.counts_by_class([CLASS_ID, uid(2), uid(3)]) == {CLASS_ID: 1, uid(2): 1, uid(3): 0}


def test_roster_children_sorted_by_name_with_placeholder_for_missing():
    service = make_service(
        [
            Booking(child_id=uid(11), class_id=CLASS_ID, status="active"),
            Booking(child_id=uid(12), class_id=CLASS_ID, status="active"),
            Booking(child_id=uid(13), class_id=CLASS_ID, status="active"),
        ],
        [
            Child(child_id=uid(11), first_name="Zoe", last_name="Adams", pickup_policy="yes"),
            Child(child_id=uid(12), first_name="amir", last_name="Khan", pickup_policy="no"),
        ],
    )

    children = service.roster_children(CLASS_ID)

    assert [c.full_name for c in children] == ["amir Khan", "Unknown student", "Zoe Adams"]
    assert [c.requires_pickup for c in children] == [True, True, False]
