# backend/homefix/services/rating_aggregator.py
"""
Rating aggregation for technicians and services.

Projections are always recomputed from every review for the key, under a
per-key Redis lock, and written in one transaction. Because the inputs are
the full review set, concurrent or reordered review writes converge on the
same result once the last recompute finishes.
"""

from contextlib import ExitStack, contextmanager
import logging
from typing import Iterator, NamedTuple, Optional

from sqlalchemy.orm import Session

from ..core.locks import rating_lock_sync
from ..events.realtime_events import SERVICE_UPDATED
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.review_repository import ReviewRepository
from ..repositories.technician_profile_repository import TechnicianProfileRepository
from .base import BaseService
from .ratings_math import (
    ServiceStats,
    TechnicianStats,
    compute_service_stats,
    compute_technician_stats,
)
from .side_effects import SideEffects

logger = logging.getLogger(__name__)


class ReviewKeys(NamedTuple):
    """The projection keys a review contributes to."""

    technician_id: str
    service_id: Optional[str]


class AggregationResult(NamedTuple):
    technician: TechnicianStats
    service: Optional[ServiceStats]


class RatingAggregator(BaseService):
    def __init__(self, db: Session, side_effects: SideEffects):
        super().__init__(db)
        self.side_effects = side_effects
        self.review_repository = ReviewRepository(db)
        self.profile_repository = TechnicianProfileRepository(db)
        self.catalog_repository = CatalogRepository(db)

    @BaseService.measure_operation("on_review_written")
    def on_review_written(self, review) -> AggregationResult:
        return self._refresh(ReviewKeys(review.technician_id, review.service_id))

    @BaseService.measure_operation("on_review_removed")
    def on_review_removed(self, review) -> AggregationResult:
        """``review`` may be a deleted row's ReviewKeys snapshot."""
        return self._refresh(ReviewKeys(review.technician_id, review.service_id))

    @contextmanager
    def locked(self, keys: ReviewKeys) -> Iterator[None]:
        """
        Hold the technician and service rating locks for ``keys``.

        Review writes run their insert/update/delete and ``recompute`` inside
        this block and one transaction, so a failed recompute rolls the
        review back with it.
        """
        with ExitStack() as stack:
            acquired = stack.enter_context(rating_lock_sync("technician", keys.technician_id))
            if keys.service_id:
                acquired = stack.enter_context(rating_lock_sync("service", keys.service_id)) and acquired
            if not acquired:
                # Recomputing anyway is safe: the last writer reads the full set.
                logger.warning(
                    "Rating lock wait timed out for technician %s; recomputing without it",
                    keys.technician_id,
                )
            yield

    def recompute(self, keys: ReviewKeys) -> AggregationResult:
        """Rewrite both projections for ``keys``. Flushes only."""
        technician_stats = self.recompute_technician(keys.technician_id)
        service_stats = self.recompute_service(keys.service_id) if keys.service_id else None
        return AggregationResult(technician_stats, service_stats)

    def announce(self, keys: ReviewKeys, result: AggregationResult) -> None:
        """Publish ``service:updated`` once the recompute is committed."""
        if result.service is None:
            return
        self.side_effects.publish_to_admins(
            SERVICE_UPDATED,
            {
                "service_id": keys.service_id,
                "rating": result.service.rating,
                "review_count": result.service.review_count,
            },
        )

    def _refresh(self, keys: ReviewKeys) -> AggregationResult:
        with self.locked(keys):
            with self.transaction():
                result = self.recompute(keys)
        self.announce(keys, result)
        return result

    def recompute_technician(self, technician_id: str) -> TechnicianStats:
        """Rewrite the technician's rating projection. Flushes only."""
        rows = self.review_repository.get_technician_rating_rows(technician_id)
        stats = compute_technician_stats(rows)
        profile = self.profile_repository.get_or_create(technician_id)

        profile.avg_rating = stats.avg_rating
        profile.review_count = stats.review_count
        profile.category_ratings = stats.category_ratings
        if stats.is_empty:
            # A technician with no remaining reviews starts over
            profile.total_jobs = 0
        self.db.flush()

        prometheus_metrics.record_rating_recomputation("technician")
        self.logger.info(
            f"Technician {technician_id} rating recomputed: "
            f"{stats.avg_rating} over {stats.review_count} reviews"
        )
        return stats

    def recompute_service(self, service_id: str) -> Optional[ServiceStats]:
        service = self.catalog_repository.get_service(service_id)
        if service is None:
            logger.warning("Service %s no longer exists; skipping rating recompute", service_id)
            return None
        stats = compute_service_stats(self.review_repository.get_service_ratings(service_id))
        service.rating = stats.rating
        service.review_count = stats.review_count
        self.db.flush()

        prometheus_metrics.record_rating_recomputation("service")
        return stats
