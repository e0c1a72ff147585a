# backend/homefix/schemas/review.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field
from pydantic.functional_validators import field_validator

from ..core.config import settings
from .base import ORMResponseModel, StrictRequestModel


def _clean_review_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v2 = v.strip()
    if not v2:
        raise ValueError("Review text is required")
    if len(v2) > settings.review_text_max_length:
        raise ValueError(f"Review text cannot exceed {settings.review_text_max_length} characters")
    return v2


class ReviewCreateRequest(StrictRequestModel):
    rating: int = Field(..., ge=1, le=5)
    technician_rating: int = Field(..., ge=1, le=5)
    review: str

    @field_validator("review")
    @classmethod
    def _clean_text(cls, v: str) -> str:
        return _clean_review_text(v)


class ReviewUpdateRequest(StrictRequestModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    technician_rating: Optional[int] = Field(None, ge=1, le=5)
    review: Optional[str] = None

    @field_validator("review")
    @classmethod
    def _clean_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_review_text(v)


class ReviewResponse(ORMResponseModel):
    id: str
    booking_id: str
    customer_id: str
    technician_id: str
    service_id: Optional[str] = None
    category: str
    rating: int
    technician_rating: int
    review: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class ReviewListResponse(ORMResponseModel):
    reviews: List[ReviewResponse]
    count: int
