"""Event names published to realtime subscribers."""

from typing import Final

ADMIN_CHANNEL: Final = "admin"

BOOKING_CREATED: Final = "booking:created"
BOOKING_UPDATED: Final = "booking:updated"
# Emitted alongside booking:updated when a technician declines; the booking
# payload itself will show status PENDING.
BOOKING_REJECTED: Final = "booking:rejected"

REVIEW_CREATED: Final = "review:created"
REVIEW_UPDATED: Final = "review:updated"
REVIEW_DELETED: Final = "review:deleted"

SERVICE_UPDATED: Final = "service:updated"

TECHNICIAN_ONLINE: Final = "technician:online"
TECHNICIAN_OFFLINE: Final = "technician:offline"


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"
