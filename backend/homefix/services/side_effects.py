# backend/homefix/services/side_effects.py
"""
Best-effort delivery of notifications and realtime events.

Everything here runs after the state change has been committed. A failure
is logged and counted; it is never raised to the caller and never rolls
back the committed change.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ..events.realtime_events import ADMIN_CHANNEL, user_channel
from ..monitoring.prometheus_metrics import prometheus_metrics
from .notification_service import NotificationDispatcher
from .realtime_publisher import EventPublisher

logger = logging.getLogger(__name__)


class SideEffects:
    def __init__(self, notifier: NotificationDispatcher, publisher: EventPublisher):
        self.notifier = notifier
        self.publisher = publisher

    def notify(
        self,
        recipient_id: Optional[str],
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        if not recipient_id:
            return False
        try:
            self.notifier.send(
                recipient_id=recipient_id, type=type, title=title, message=message, data=data
            )
            return True
        except Exception as exc:
            prometheus_metrics.record_side_effect_failure("notification")
            logger.error(
                "Notification %s to %s failed: %s", type, recipient_id, exc, exc_info=True
            )
            return False

    def notify_many(
        self,
        recipient_ids: Iterable[Optional[str]],
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> int:
        delivered = 0
        seen = set()
        for recipient_id in recipient_ids:
            if not recipient_id or recipient_id in seen:
                continue
            seen.add(recipient_id)
            if self.notify(recipient_id, type, title, message, data):
                delivered += 1
        return delivered

    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> bool:
        try:
            self.publisher.publish(channel, event_name, payload)
            return True
        except Exception as exc:
            prometheus_metrics.record_side_effect_failure("realtime")
            logger.error("Realtime publish %s to %s failed: %s", event_name, channel, exc)
            return False

    def publish_to_admins(self, event_name: str, payload: Dict[str, Any]) -> bool:
        return self.publish(ADMIN_CHANNEL, event_name, payload)

    def publish_to_user(self, user_id: Optional[str], event_name: str, payload: Dict[str, Any]) -> bool:
        if not user_id:
            return False
        return self.publish(user_channel(user_id), event_name, payload)
