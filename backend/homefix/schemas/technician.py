# backend/homefix/schemas/technician.py
from typing import List

from pydantic import BaseModel, Field

from .base import ORMResponseModel, StrictRequestModel


class CategoryRating(BaseModel):
    category: str
    avgRating: float
    count: int


class TechnicianRatingsResponse(ORMResponseModel):
    user_id: str
    avg_rating: float
    review_count: int
    category_ratings: List[CategoryRating] = Field(default_factory=list)
    total_jobs: int


class AvailabilityUpdateRequest(StrictRequestModel):
    is_online: bool


class AvailabilityResponse(ORMResponseModel):
    user_id: str
    is_online: bool
    availability_status: str
