from decimal import Decimal

import pytest

from homefix.models.booking import BookingStatus
from homefix.models.catalog import Service
from homefix.models.technician import TechnicianProfile
from homefix.services.rating_aggregator import ReviewKeys


def _profile(db, user_id):
    db.expire_all()
    return db.query(TechnicianProfile).filter_by(user_id=user_id).one()


@pytest.fixture
def completed(factory, customer, technician, category):
    def make(**kwargs):
        return factory.booking(
            customer,
            category,
            status=BookingStatus.COMPLETED,
            technician=technician,
            final_amount=Decimal("500"),
            **kwargs,
        )

    return make


def test_deleting_lowest_review_raises_average(db, factory, aggregator, technician, completed):
    reviews = [factory.review(completed(), r) for r in (4, 5, 3)]
    aggregator.on_review_written(reviews[-1])

    profile = _profile(db, technician.id)
    assert profile.avg_rating == 4.0
    assert profile.review_count == 3

    keys = ReviewKeys(reviews[2].technician_id, reviews[2].service_id)
    db.delete(reviews[2])
    db.commit()
    aggregator.on_review_removed(keys)

    profile = _profile(db, technician.id)
    assert profile.avg_rating == 4.5
    assert profile.review_count == 2


def test_category_projection_replaced_wholesale(db, factory, aggregator, technician, completed):
    first = factory.review(completed(), 5, category="Plumbing")
    aggregator.on_review_written(first)
    second = factory.review(completed(), 2, category="Electrical")
    aggregator.on_review_written(second)

    assert _profile(db, technician.id).category_ratings == [
        {"category": "Plumbing", "avgRating": 5.0, "count": 1},
        {"category": "Electrical", "avgRating": 2.0, "count": 1},
    ]


def test_last_review_removed_resets_profile(db, factory, aggregator, technician, completed):
    review = factory.review(completed(), 5)
    aggregator.on_review_written(review)
    profile = _profile(db, technician.id)
    profile.total_jobs = 7
    db.commit()

    keys = ReviewKeys(review.technician_id, review.service_id)
    db.delete(review)
    db.commit()
    aggregator.on_review_removed(keys)

    profile = _profile(db, technician.id)
    assert (profile.avg_rating, profile.review_count, profile.total_jobs) == (0.0, 0, 0)
    assert profile.category_ratings == []


def test_total_jobs_kept_while_reviews_remain(db, factory, aggregator, technician, completed):
    aggregator.on_review_written(factory.review(completed(), 5))
    profile = _profile(db, technician.id)
    profile.total_jobs = 3
    db.commit()

    aggregator.on_review_written(factory.review(completed(), 4))
    assert _profile(db, technician.id).total_jobs == 3


def test_service_projection_and_event(db, factory, aggregator, publisher, technician, category, completed):
    service = factory.service(category)
    reviews = [factory.review(completed(service_id=service.id), 5, rating=r) for r in (5, 4, 4)]

    result = aggregator.on_review_written(reviews[0])

    db.expire_all()
    stored = db.get(Service, service.id)
    assert (stored.rating, stored.review_count) == (4.3, 3)
    assert result.service.rating == 4.3
    events = publisher.on("admin", "service:updated")
    assert events[-1]["payload"] == {"service_id": service.id, "rating": 4.3, "review_count": 3}


def test_no_service_event_without_service(factory, aggregator, publisher, completed):
    result = aggregator.on_review_written(factory.review(completed(), 5))
    assert result.service is None
    assert publisher.on("admin", "service:updated") == []


def test_any_single_recompute_converges(db, factory, aggregator, technician, completed):
    # Reviews written without any aggregation in between
    ratings = [1, 5, 4, 2, 5]
    reviews = [factory.review(completed(), r) for r in ratings]

    aggregator.on_review_written(reviews[1])

    profile = _profile(db, technician.id)
    assert profile.avg_rating == 3.4
    assert profile.review_count == len(ratings)


def test_lock_timeout_still_recomputes(db, factory, aggregator, monkeypatch, technician, completed):
    from contextlib import contextmanager

    @contextmanager
    def busy(projection, key_id, ttl_s=None, wait_s=2.0):
        yield False

    monkeypatch.setattr("homefix.services.rating_aggregator.rating_lock_sync", busy)
    aggregator.on_review_written(factory.review(completed(), 4))
    assert _profile(db, technician.id).avg_rating == 4.0
