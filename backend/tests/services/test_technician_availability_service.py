import pytest

from homefix.core.exceptions import BusinessRuleException, NotFoundException
from homefix.models.booking import BookingStatus
from homefix.services.technician_availability_service import TechnicianAvailabilityService


@pytest.fixture
def availability(db, side_effects):
    return TechnicianAvailabilityService(db, side_effects)


def test_go_online_and_offline(availability, publisher, technician):
    profile = availability.set_online(technician.id, True)
    assert profile.is_online is True
    assert profile.availability_status == "ONLINE"
    assert publisher.on("admin", "technician:online")[-1]["payload"]["technician_id"] == technician.id

    profile = availability.set_online(technician.id, False)
    assert profile.is_online is False
    assert profile.availability_status == "OFFLINE"
    assert publisher.on("admin", "technician:offline")


def test_cannot_go_offline_with_job_in_progress(availability, factory, customer, technician, category):
    availability.set_online(technician.id, True)
    factory.booking(
        customer, category, status=BookingStatus.IN_PROGRESS, technician=technician, security_pin="123456"
    )

    with pytest.raises(BusinessRuleException) as excinfo:
        availability.set_online(technician.id, False)
    assert excinfo.value.code == "JOB_IN_PROGRESS"
    assert availability.get_profile(technician.id).is_online is True


def test_record_completed_job_counts_and_reopens(db, availability, technician):
    availability.set_online(technician.id, False)

    availability.record_completed_job(technician.id)
    availability.record_completed_job(technician.id)
    db.commit()

    profile = availability.get_profile(technician.id)
    assert profile.total_jobs == 2
    assert profile.is_online is True


def test_profile_lookup_missing(availability):
    with pytest.raises(NotFoundException):
        availability.get_profile("01HNOTATECHNICIANXXXXXXXXX")
