# backend/homefix/services/notification_service.py
"""
Notification dispatcher.

The booking engine and the review flow call ``send`` after their own state
change has been committed. Delivery is advisory: callers go through
SideEffects, which logs and swallows any failure raised here.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from ..models.notification import Notification
from ..repositories.notification_repository import NotificationRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def send(
        self,
        *,
        recipient_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...


class NotificationService(BaseService):
    """Persists notifications to the in-app inbox."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = NotificationRepository(db)

    @BaseService.measure_operation("send_notification")
    def send(
        self,
        *,
        recipient_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        with self.transaction():
            self.repository.create(
                recipient_id=recipient_id,
                type=type,
                title=title,
                message=message,
                data=data or {},
            )
        logger.info("Notification %s queued for %s", type, recipient_id)

    def list_for_user(self, user_id: str, limit: int = 50) -> List[Notification]:
        return self.repository.list_for_recipient(user_id, limit=limit)
