"""
Central export point for all dependencies.
"""

from .auth import get_current_actor, require_admin, require_customer, require_technician
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_event_publisher,
    get_notification_service,
    get_review_service,
    get_side_effects,
)

__all__ = [
    # Auth
    "get_current_actor",
    "require_admin",
    "require_customer",
    "require_technician",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_service",
    "get_event_publisher",
    "get_notification_service",
    "get_review_service",
    "get_side_effects",
]
