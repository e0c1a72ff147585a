from decimal import Decimal

from homefix.models.booking import Booking, BookingStatus
from homefix.repositories.booking_repository import BookingRepository


class TestApplyFields:
    """Version-checked field writes."""

    def test_matching_version_writes_and_bumps(self, db, factory, customer, category):
        booking = factory.booking(customer, category)
        repo = BookingRepository(db)

        assert repo.apply_fields(booking.id, 1, {"notes": "Gate code 4411"}) is True
        db.commit()

        reloaded = repo.reload(booking.id)
        assert reloaded.notes == "Gate code 4411"
        assert reloaded.version == 2

    def test_stale_version_writes_nothing(self, db, factory, customer, category):
        booking = factory.booking(customer, category)
        repo = BookingRepository(db)
        assert repo.apply_fields(booking.id, 1, {"notes": "first"})
        db.commit()

        assert repo.apply_fields(booking.id, 1, {"notes": "second"}) is False
        db.commit()
        assert repo.reload(booking.id).notes == "first"

    def test_writes_only_named_fields(self, db, factory, customer, category):
        booking = factory.booking(customer, category, address="12 MG Road")
        repo = BookingRepository(db)
        repo.apply_fields(booking.id, 1, {"status": BookingStatus.CANCELLED.value})
        db.commit()
        reloaded = repo.reload(booking.id)
        assert reloaded.address == "12 MG Road"
        assert reloaded.status == "CANCELLED"


class TestListing:
    def test_filters_drop_none(self, db, factory, customer, technician, category):
        factory.booking(customer, category)
        factory.booking(customer, category, status=BookingStatus.ASSIGNED, technician=technician)
        repo = BookingRepository(db)

        assert len(repo.list_bookings(customer_id=customer.id)) == 2
        assert len(repo.list_bookings(customer_id=customer.id, status="ASSIGNED")) == 1
        assert repo.count_for_technician(technician.id, BookingStatus.ASSIGNED) == 1

    def test_earliest_first_statuses(self):
        assert BookingRepository.sorts_earliest_first("PENDING")
        assert BookingRepository.sorts_earliest_first("ASSIGNED")
        assert not BookingRepository.sorts_earliest_first("COMPLETED")
        assert not BookingRepository.sorts_earliest_first(None)

    def test_completed_stats_empty(self, db, technician):
        assert BookingRepository(db).get_technician_completed_stats(technician.id) == (0, Decimal("0"))


def test_get_missing_booking_returns_none(db):
    assert BookingRepository(db).get_by_id("missing") is None
    assert db.query(Booking).count() == 0
