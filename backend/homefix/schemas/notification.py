# backend/homefix/schemas/notification.py
from datetime import datetime
from typing import Any, Dict, List

from pydantic import Field

from .base import ORMResponseModel


class NotificationResponse(ORMResponseModel):
    id: str
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime


class NotificationListResponse(ORMResponseModel):
    notifications: List[NotificationResponse]
    unread_count: int
