# backend/homefix/services/ratings_math.py
"""
Pure rating computations.

Every projection is recomputed from the complete review set for its key, so
the result depends only on which reviews exist and never on the order in
which they were written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Tuple


def round_half_up(value: float | Decimal, places: int = 1) -> float:
    """Round half away from zero, unlike the built-in banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def mean_rating(ratings: Iterable[int]) -> Tuple[float, int]:
    """Return ``(rounded mean, count)``; ``(0.0, 0)`` for an empty set."""
    values = [int(r) for r in ratings]
    if not values:
        return 0.0, 0
    return round_half_up(Decimal(sum(values)) / Decimal(len(values))), len(values)


@dataclass(frozen=True)
class TechnicianStats:
    avg_rating: float
    review_count: int
    category_ratings: List[Dict[str, object]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.review_count == 0


@dataclass(frozen=True)
class ServiceStats:
    rating: float
    review_count: int


def compute_category_ratings(rows: Iterable[Tuple[str, int]]) -> List[Dict[str, object]]:
    """
    Group ``(category, technician_rating)`` rows by category.

    Categories are emitted in first-seen order; the projection is replaced
    wholesale on every recompute.
    """
    grouped: Dict[str, List[int]] = {}
    for category, rating in rows:
        grouped.setdefault(category, []).append(int(rating))
    result: List[Dict[str, object]] = []
    for category, ratings in grouped.items():
        avg, count = mean_rating(ratings)
        result.append({"category": category, "avgRating": avg, "count": count})
    return result


def compute_technician_stats(rows: Iterable[Tuple[str, int]]) -> TechnicianStats:
    rows = list(rows)
    avg, count = mean_rating(rating for _, rating in rows)
    if count == 0:
        return TechnicianStats(avg_rating=0.0, review_count=0, category_ratings=[])
    return TechnicianStats(
        avg_rating=avg,
        review_count=count,
        category_ratings=compute_category_ratings(rows),
    )


def compute_service_stats(ratings: Iterable[int]) -> ServiceStats:
    avg, count = mean_rating(ratings)
    return ServiceStats(rating=avg, review_count=count)
