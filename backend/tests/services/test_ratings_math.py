import pytest

from homefix.services.ratings_math import (
    compute_category_ratings,
    compute_service_stats,
    compute_technician_stats,
    mean_rating,
    round_half_up,
)


@pytest.mark.parametrize(
    "value,expected",
    [(4.25, 4.3), (4.35, 4.4), (4.349, 4.3), (4.0, 4.0), (2.05, 2.1)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_mean_rating_empty():
    assert mean_rating([]) == (0.0, 0)


def test_mean_rating_rounds_third():
    # 13 / 3 = 4.333...
    assert mean_rating([4, 4, 5]) == (4.3, 3)


def test_technician_stats_group_categories_in_first_seen_order():
    rows = [("Plumbing", 4), ("Electrical", 5), ("Plumbing", 3), ("Electrical", 4)]
    stats = compute_technician_stats(rows)

    assert stats.avg_rating == 4.0
    assert stats.review_count == 4
    assert stats.category_ratings == [
        {"category": "Plumbing", "avgRating": 3.5, "count": 2},
        {"category": "Electrical", "avgRating": 4.5, "count": 2},
    ]


def test_technician_stats_empty_resets():
    stats = compute_technician_stats([])
    assert stats.is_empty
    assert (stats.avg_rating, stats.review_count, stats.category_ratings) == (0.0, 0, [])


def test_result_does_not_depend_on_order():
    rows = [("General", 1), ("Plumbing", 5), ("General", 4), ("Plumbing", 2)]
    forward = compute_technician_stats(rows)
    backward = compute_technician_stats(list(reversed(rows)))
    assert (forward.avg_rating, forward.review_count) == (backward.avg_rating, backward.review_count)
    assert sorted(forward.category_ratings, key=lambda c: c["category"]) == sorted(
        backward.category_ratings, key=lambda c: c["category"]
    )


def test_category_ratings_single_group():
    assert compute_category_ratings([("General", 5)]) == [
        {"category": "General", "avgRating": 5.0, "count": 1}
    ]


def test_service_stats():
    stats = compute_service_stats([5, 4])
    assert (stats.rating, stats.review_count) == (4.5, 2)
    empty = compute_service_stats([])
    assert (empty.rating, empty.review_count) == (0.0, 0)
