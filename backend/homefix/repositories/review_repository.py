# backend/homefix/repositories/review_repository.py
"""
Repository for reviews.

No business logic, DB-only operations. The aggregation reads return plain
rating tuples so that the pure rating functions stay ORM-free.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class DuplicateReviewError(RepositoryException):
    """The unique constraint on reviews.booking_id rejected an insert."""


class ReviewRepository(BaseRepository[Review]):
    """Data access for `Review`."""

    def __init__(self, db: Session):
        super().__init__(db, Review)
        self.logger = logging.getLogger(__name__)

    def create_review(self, **kwargs) -> Review:
        try:
            review = Review(**kwargs)
            self.db.add(review)
            self.db.flush()
            return review
        except IntegrityError as e:
            self.logger.warning(f"Duplicate review rejected for booking {kwargs.get('booking_id')}")
            raise DuplicateReviewError(str(e))
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating review: {e}")
            raise RepositoryException(f"Failed to create review: {e}")

    def exists_for_booking(self, booking_id: str) -> bool:
        try:
            return (
                self.db.query(Review.id).filter(Review.booking_id == booking_id).first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking review existence: {e}")
            raise RepositoryException(f"Failed to check review existence: {e}")

    def get_by_booking_id(self, booking_id: str) -> Optional[Review]:
        try:
            return self.db.query(Review).filter(Review.booking_id == booking_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching review by booking: {e}")
            raise RepositoryException(f"Failed to fetch review by booking: {e}")

    def get_technician_rating_rows(self, technician_id: str) -> List[Tuple[str, int]]:
        """Return (category, technician_rating) for every review of a technician."""
        try:
            rows = (
                self.db.query(Review.category, Review.technician_rating)
                .filter(Review.technician_id == technician_id)
                .all()
            )
            return [(category, int(rating)) for category, rating in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error reading technician ratings: {e}")
            raise RepositoryException(f"Failed to read technician ratings: {e}")

    def get_service_ratings(self, service_id: str) -> List[int]:
        try:
            rows = self.db.query(Review.rating).filter(Review.service_id == service_id).all()
            return [int(rating) for (rating,) in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error reading service ratings: {e}")
            raise RepositoryException(f"Failed to read service ratings: {e}")

    def list_for_technician(self, technician_id: str, limit: int = 50, skip: int = 0) -> List[Review]:
        return (
            self.db.query(Review)
            .filter(Review.technician_id == technician_id)
            .order_by(Review.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_all(self, limit: int = 100, skip: int = 0) -> List[Review]:
        return self.db.query(Review).order_by(Review.created_at.desc()).offset(skip).limit(limit).all()
