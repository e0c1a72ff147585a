"""Realtime event names and channel helpers."""

from .realtime_events import (
    ADMIN_CHANNEL,
    BOOKING_CREATED,
    BOOKING_REJECTED,
    BOOKING_UPDATED,
    REVIEW_CREATED,
    REVIEW_DELETED,
    REVIEW_UPDATED,
    SERVICE_UPDATED,
    TECHNICIAN_OFFLINE,
    TECHNICIAN_ONLINE,
    user_channel,
)

__all__ = [
    "ADMIN_CHANNEL",
    "BOOKING_CREATED",
    "BOOKING_REJECTED",
    "BOOKING_UPDATED",
    "REVIEW_CREATED",
    "REVIEW_DELETED",
    "REVIEW_UPDATED",
    "SERVICE_UPDATED",
    "TECHNICIAN_OFFLINE",
    "TECHNICIAN_ONLINE",
    "user_channel",
]
