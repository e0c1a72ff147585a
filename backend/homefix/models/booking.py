# backend/homefix/models/booking.py
"""
Booking model for the HomeFix platform.

A booking is the unit of requested work between a customer and a field
technician. Its status is mutated only by the booking lifecycle engine
(``homefix.services.booking_service``); every write goes through a single
version-checked UPDATE so that concurrent transitions cannot both win.

Note on REJECTED: the status enum deliberately has no REJECTED member. A
technician rejecting an assignment is an input to the engine that puts the
booking back to PENDING with no technician; observers receive a
BOOKING_REJECTED notification and a ``booking:rejected`` event, but no
booking is ever stored as rejected.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class BookingStatus(str, Enum):
    """Persisted booking lifecycle statuses."""

    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


PIN_BEARING_STATUSES = frozenset({BookingStatus.ACCEPTED, BookingStatus.IN_PROGRESS})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    customer_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    technician_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    category_id = Column(String(26), ForeignKey("categories.id"), nullable=False)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=True)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False)
    final_amount = Column(Numeric(10, 2), nullable=True)
    extra_reason = Column(Text, nullable=True)

    # Happy Pin, issued on acceptance and cleared on completion/cancellation
    security_pin = Column(String(10), nullable=True)

    technician_note = Column(Text, nullable=True)
    part_images = Column(JSON, nullable=False, default=list)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    # Optimistic concurrency counter, bumped by every lifecycle write
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, default=_utcnow, onupdate=_utcnow)

    customer = relationship("User", foreign_keys=[customer_id])
    technician = relationship("User", foreign_keys=[technician_id])
    category = relationship("Category")
    service = relationship("Service")
    review = relationship("Review", uselist=False, back_populates="booking")

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_bookings_price_non_negative"),
        CheckConstraint(
            "status IN ('PENDING','ASSIGNED','ACCEPTED','IN_PROGRESS','COMPLETED','CANCELLED')",
            name="ck_bookings_status",
        ),
        Index("idx_bookings_technician_status", "technician_id", "status"),
        Index("idx_bookings_customer_status", "customer_id", "status"),
    )

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

    def __repr__(self) -> str:
        return f"<Booking {self.id} status={self.status} technician={self.technician_id}>"
