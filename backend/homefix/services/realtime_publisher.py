# backend/homefix/services/realtime_publisher.py
"""
Realtime event publisher over Redis pub/sub.

Channels:
- "admin": every administrator dashboard
- "user:{user_id}": one user's private channel

Each message is a JSON envelope with the event name, a schema version, a
timestamp and the payload. Socket/SSE gateways subscribe to these channels
and forward to connected clients.
"""

from datetime import datetime, timezone
import json
import logging
import threading
from typing import Any, Dict, Optional, Protocol

from redis import Redis

from ..core.config import settings

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class EventPublisher(Protocol):
    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        ...


class RedisRealtimePublisher:
    """
    Publishes to ``{namespace}:{channel}``.

    Without a Redis client the event is only logged, which keeps local
    single-process setups working.
    """

    def __init__(self, redis: Optional[Redis] = None, namespace: Optional[str] = None):
        self._redis = redis
        self._namespace = namespace or settings.redis_namespace
        self.publish_count = 0

    def _envelope(self, event_name: str, payload: Dict[str, Any]) -> str:
        return json.dumps(
            {
                "type": event_name,
                "schema_version": SCHEMA_VERSION,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "payload": payload,
            },
            default=str,
        )

    def publish(self, channel: str, event_name: str, payload: Dict[str, Any]) -> None:
        if self._redis is None:
            logger.debug("[REALTIME] Redis not configured, dropping %s for %s", event_name, channel)
            return
        subscribers = self._redis.publish(f"{self._namespace}:{channel}", self._envelope(event_name, payload))
        self.publish_count += 1
        logger.debug(f"[REALTIME] Published {event_name} to {channel} (subscribers: {subscribers})")


_publisher: Optional[RedisRealtimePublisher] = None
_publisher_lock = threading.Lock()


def get_realtime_publisher() -> RedisRealtimePublisher:
    """Process-wide publisher built from settings.redis_url."""
    global _publisher
    if _publisher is not None:
        return _publisher
    with _publisher_lock:
        if _publisher is None:
            client = (
                Redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
                if settings.redis_url
                else None
            )
            _publisher = RedisRealtimePublisher(client)
    return _publisher
