# backend/homefix/schemas/booking.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..core.enums import RoleName
from ..models.booking import Booking
from ..services.booking_transitions import TransitionPayload, TransitionTarget
from .base import Money, ORMResponseModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Either a catalog service or a bare category must be given."""

    category_id: Optional[str] = None
    service_id: Optional[str] = None
    scheduled_at: datetime
    notes: Optional[str] = Field(None, max_length=2000)
    address: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def _require_target(self) -> "BookingCreate":
        if not self.category_id and not self.service_id:
            raise ValueError("category_id or service_id is required")
        return self


class BookingTransitionRequest(StrictRequestModel):
    status: TransitionTarget
    technician_id: Optional[str] = None
    security_pin: Optional[str] = Field(None, max_length=10)
    final_amount: Optional[Money] = None
    extra_reason: Optional[str] = Field(None, max_length=1000)
    technician_note: Optional[str] = Field(None, max_length=2000)
    part_images: List[str] = Field(default_factory=list, max_length=20)
    cancellation_reason: Optional[str] = Field(None, max_length=1000)

    def to_payload(self) -> TransitionPayload:
        return TransitionPayload(
            technician_id=self.technician_id,
            security_pin=self.security_pin,
            final_amount=self.final_amount,
            extra_reason=self.extra_reason,
            technician_note=self.technician_note,
            part_images=list(self.part_images),
            cancellation_reason=self.cancellation_reason,
        )


class TechnicianAssignmentRequest(StrictRequestModel):
    """``technician_id=None`` returns the booking to the open pool."""

    technician_id: Optional[str] = None


class BookingResponse(ORMResponseModel):
    id: str
    customer_id: str
    technician_id: Optional[str] = None
    category_id: str
    service_id: Optional[str] = None
    status: str
    price: Money
    final_amount: Optional[Money] = None
    extra_reason: Optional[str] = None
    security_pin: Optional[str] = None
    technician_note: Optional[str] = None
    part_images: List[str] = Field(default_factory=list)
    scheduled_at: datetime
    notes: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("part_images", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    @classmethod
    def for_viewer(cls, booking: Booking, role: RoleName) -> "BookingResponse":
        """Render a booking for ``role``. Technicians never see the Happy Pin."""
        response = cls.model_validate(booking)
        if role is RoleName.TECHNICIAN:
            response = response.model_copy(update={"security_pin": None})
        return response


class BookingListResponse(ORMResponseModel):
    bookings: List[BookingResponse]
    count: int


class TechnicianStatsResponse(ORMResponseModel):
    technician_id: str
    completed_jobs: int
    total_earnings: Money
    total_jobs: int
    avg_rating: float
    review_count: int
