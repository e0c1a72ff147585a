"""Import every model so Base.metadata is complete."""

from .audit_log import AuditLog
from .booking import PIN_BEARING_STATUSES, Booking, BookingStatus
from .catalog import Category, Service
from .notification import Notification
from .review import DEFAULT_REVIEW_CATEGORY, Review
from .technician import TechnicianProfile
from .user import User

__all__ = [
    "AuditLog",
    "Booking",
    "BookingStatus",
    "Category",
    "DEFAULT_REVIEW_CATEGORY",
    "Notification",
    "PIN_BEARING_STATUSES",
    "Review",
    "Service",
    "TechnicianProfile",
    "User",
]
