# backend/homefix/services/review_service.py
"""
Review Service

Customers review a booking once it is COMPLETED; they may edit their own
review afterwards and administrators may delete any review. Every mutation
recomputes the technician and service ratings in the same transaction, so
a failed recompute leaves the review unchanged.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.enums import AuditAction, NotificationType
from ..core.exceptions import (
    DuplicateReviewException,
    ForbiddenException,
    NotCompletedException,
    NotFoundException,
    ValidationException,
)
from ..events.realtime_events import REVIEW_CREATED, REVIEW_DELETED, REVIEW_UPDATED
from ..models.booking import Booking, BookingStatus
from ..models.review import DEFAULT_REVIEW_CATEGORY, Review
from ..repositories.booking_repository import BookingRepository
from ..repositories.review_repository import DuplicateReviewError, ReviewRepository
from ..schemas.review import ReviewCreateRequest, ReviewResponse, ReviewUpdateRequest
from .audit_service import AuditService
from .base import BaseService
from .rating_aggregator import RatingAggregator, ReviewKeys
from .side_effects import SideEffects

logger = logging.getLogger(__name__)


class ReviewService(BaseService):
    def __init__(
        self,
        db: Session,
        side_effects: SideEffects,
        aggregator: Optional[RatingAggregator] = None,
    ):
        super().__init__(db)
        self.side_effects = side_effects
        self.repository = ReviewRepository(db)
        self.booking_repository = BookingRepository(db)
        self.aggregator = aggregator or RatingAggregator(db, side_effects)
        self.audit = AuditService(db)

    @BaseService.measure_operation("create_review")
    def create_review(self, customer_id: str, booking_id: str, data: ReviewCreateRequest) -> Review:
        """Submit the single review allowed for a completed booking."""
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        if booking.customer_id != customer_id:
            raise ForbiddenException("You can only review your own booking")
        if booking.status != BookingStatus.COMPLETED.value:
            raise NotCompletedException(booking_id, booking.status)
        if booking.technician_id is None:
            raise ValidationException("Booking has no technician to review")
        if self.repository.exists_for_booking(booking_id):
            raise DuplicateReviewException(booking_id)

        keys = ReviewKeys(booking.technician_id, booking.service_id)
        with self.aggregator.locked(keys), self.transaction():
            try:
                review = self.repository.create_review(
                    booking_id=booking_id,
                    customer_id=customer_id,
                    technician_id=booking.technician_id,
                    service_id=booking.service_id,
                    category=self._category_name(booking),
                    rating=data.rating,
                    technician_rating=data.technician_rating,
                    review=data.review,
                )
            except DuplicateReviewError:
                # Lost a race with a concurrent submission for the same booking
                raise DuplicateReviewException(booking_id)
            review_id = review.id
            aggregation = self.aggregator.recompute(keys)

        review = self.repository.get_by_id(review_id)
        self.aggregator.announce(keys, aggregation)

        self.side_effects.notify(
            review.technician_id,
            NotificationType.NEW_REVIEW.value,
            "New Review",
            f"You received a {review.technician_rating}-star review",
            {"booking_id": booking_id, "review_id": review.id},
        )
        self._publish(REVIEW_CREATED, review)
        return review

    @BaseService.measure_operation("update_review")
    def update_review(self, customer_id: str, booking_id: str, data: ReviewUpdateRequest) -> Review:
        review = self.repository.get_by_booking_id(booking_id)
        if review is None:
            raise NotFoundException("Review not found", details={"booking_id": booking_id})
        if review.customer_id != customer_id:
            raise ForbiddenException("You can only edit your own review")

        changes: Dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise ValidationException("No review fields to update")

        keys = ReviewKeys(review.technician_id, review.service_id)
        with self.aggregator.locked(keys), self.transaction():
            for field, value in changes.items():
                setattr(review, field, value)
            self.db.flush()
            aggregation = self.aggregator.recompute(keys)

        review = self.repository.refresh(review)
        self.aggregator.announce(keys, aggregation)
        self._publish(REVIEW_UPDATED, review)
        return review

    @BaseService.measure_operation("delete_review")
    def delete_review(self, actor: Actor, review_id: str) -> ReviewKeys:
        if not actor.is_admin:
            raise ForbiddenException("Only administrators can delete reviews")
        review = self.repository.get_by_id(review_id)
        if review is None:
            raise NotFoundException("Review not found", details={"review_id": review_id})

        keys = ReviewKeys(review.technician_id, review.service_id)
        snapshot = ReviewResponse.model_validate(review).model_dump(mode="json")

        with self.aggregator.locked(keys), self.transaction():
            self.repository.delete(review_id)
            self.audit.record(
                admin_id=actor.user_id,
                action=AuditAction.REVIEW_DELETE,
                target_type="review",
                target_id=review_id,
                details={"booking_id": snapshot["booking_id"], "technician_id": keys.technician_id},
            )
            aggregation = self.aggregator.recompute(keys)

        self.aggregator.announce(keys, aggregation)
        self.side_effects.publish_to_admins(REVIEW_DELETED, snapshot)
        self.side_effects.publish_to_user(keys.technician_id, REVIEW_DELETED, snapshot)
        self.logger.info(f"Review {review_id} deleted by admin {actor.user_id}")
        return keys

    def list_for_technician(self, technician_id: str, skip: int = 0, limit: int = 50) -> List[Review]:
        return self.repository.list_for_technician(technician_id, limit=limit, skip=skip)

    def list_all(self, actor: Actor, skip: int = 0, limit: int = 100) -> List[Review]:
        if not actor.is_admin:
            raise ForbiddenException("Only administrators can list all reviews")
        return self.repository.list_all(limit=limit, skip=skip)

    @staticmethod
    def _category_name(booking: Booking) -> str:
        category = booking.category
        if category is not None and category.name:
            return category.name
        return DEFAULT_REVIEW_CATEGORY

    def _publish(self, event_name: str, review: Review) -> None:
        payload = ReviewResponse.model_validate(review).model_dump(mode="json")
        self.side_effects.publish_to_admins(event_name, payload)
        self.side_effects.publish_to_user(review.technician_id, event_name, payload)
