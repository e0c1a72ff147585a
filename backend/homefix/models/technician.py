# backend/homefix/models/technician.py
"""
Technician profile: reputation projection plus availability state.

avg_rating, review_count and category_ratings are a materialized view of
the technician's reviews. Only RatingAggregator writes them.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import AvailabilityStatus
from ..database import Base


class TechnicianProfile(Base):
    __tablename__ = "technician_profiles"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True)

    bio = Column(Text, nullable=True)

    # Reputation projection
    avg_rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    category_ratings = Column(JSON, nullable=False, default=list)
    total_jobs = Column(Integer, nullable=False, default=0)

    # Availability
    is_online = Column(Boolean, nullable=False, default=False)
    availability_status = Column(
        String(10), nullable=False, default=AvailabilityStatus.OFFLINE.value
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="technician_profile")
