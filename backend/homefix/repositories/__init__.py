from .audit_repository import AuditRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .catalog_repository import CatalogRepository
from .notification_repository import NotificationRepository
from .review_repository import ReviewRepository
from .technician_profile_repository import TechnicianProfileRepository
from .user_repository import UserRepository

__all__ = [
    "AuditRepository",
    "BaseRepository",
    "BookingRepository",
    "CatalogRepository",
    "NotificationRepository",
    "ReviewRepository",
    "TechnicianProfileRepository",
    "UserRepository",
]
