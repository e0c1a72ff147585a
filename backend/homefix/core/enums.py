# backend/homefix/core/enums.py
"""
Core enums for the HomeFix platform.

Statuses persisted on a booking live in ``homefix.models.booking``; this
module holds the values shared across layers.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles an actor can hold."""

    CUSTOMER = "CUSTOMER"
    TECHNICIAN = "TECHNICIAN"
    ADMIN = "ADMIN"


class AvailabilityStatus(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"
    BUSY = "BUSY"


class NotificationType(str, Enum):
    """Notification labels sent by the booking engine and review flow."""

    BOOKING_REQUEST = "BOOKING_REQUEST"
    BOOKING_ASSIGNED = "BOOKING_ASSIGNED"
    BOOKING_REMOVED = "BOOKING_REMOVED"
    BOOKING_ACCEPTED = "BOOKING_ACCEPTED"
    # REJECTED is only ever a label; the booking itself returns to PENDING.
    BOOKING_REJECTED = "BOOKING_REJECTED"
    BOOKING_IN_PROGRESS = "BOOKING_IN_PROGRESS"
    BOOKING_COMPLETED = "BOOKING_COMPLETED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    NEW_REVIEW = "NEW_REVIEW"


class AuditAction(str, Enum):
    BOOKING_CANCEL = "BOOKING_CANCEL"
    BOOKING_ASSIGN = "BOOKING_ASSIGN"
    BOOKING_UNASSIGN = "BOOKING_UNASSIGN"
    REVIEW_DELETE = "REVIEW_DELETE"
