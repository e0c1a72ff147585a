# backend/homefix/models/review.py
"""
Review model.

- One review per booking, enforced by a unique constraint on booking_id
- customer/technician/service/category are copied from the booking at
  creation so aggregation never has to join back to bookings
- ``rating`` scores the service, ``technician_rating`` the technician
"""

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base

DEFAULT_REVIEW_CATEGORY = "General"


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))

    booking_id = Column(String(26), ForeignKey("bookings.id"), nullable=False)
    customer_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    technician_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=True, index=True)
    category = Column(String(120), nullable=False, default=DEFAULT_REVIEW_CATEGORY)

    rating = Column(Integer, nullable=False)
    technician_rating = Column(Integer, nullable=False)
    review = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    booking = relationship("Booking", back_populates="review")

    __table_args__ = (
        UniqueConstraint("booking_id", name="uq_reviews_booking"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
        CheckConstraint(
            "technician_rating >= 1 AND technician_rating <= 5",
            name="ck_reviews_technician_rating_range",
        ),
        Index("idx_reviews_technician_category", "technician_id", "category"),
        Index("idx_reviews_created_at", "created_at"),
    )
