# backend/homefix/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.notification_service import NotificationService
from ...services.realtime_publisher import EventPublisher, get_realtime_publisher
from ...services.review_service import ReviewService
from ...services.side_effects import SideEffects
from ...services.technician_availability_service import TechnicianAvailabilityService
from .database import get_db


def get_event_publisher() -> EventPublisher:
    """Process-wide realtime publisher."""
    return get_realtime_publisher()


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_side_effects(
    notifier: NotificationService = Depends(get_notification_service),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> SideEffects:
    return SideEffects(notifier, publisher)


def get_booking_service(
    db: Session = Depends(get_db), side_effects: SideEffects = Depends(get_side_effects)
) -> BookingService:
    """Get BookingService instance with proper dependencies."""
    return BookingService(db, side_effects)


def get_review_service(
    db: Session = Depends(get_db), side_effects: SideEffects = Depends(get_side_effects)
) -> ReviewService:
    return ReviewService(db, side_effects)


def get_availability_service(
    db: Session = Depends(get_db), side_effects: SideEffects = Depends(get_side_effects)
) -> TechnicianAvailabilityService:
    return TechnicianAvailabilityService(db, side_effects)
