import json
from unittest.mock import MagicMock

from homefix.services.realtime_publisher import RedisRealtimePublisher
from homefix.services.side_effects import SideEffects


def test_publisher_envelope_and_namespace():
    redis = MagicMock()
    redis.publish.return_value = 2
    publisher = RedisRealtimePublisher(redis, namespace="homefix")

    publisher.publish("user:u1", "booking:updated", {"id": "b1", "price": 500})

    channel, message = redis.publish.call_args.args
    assert channel == "homefix:user:u1"
    envelope = json.loads(message)
    assert envelope["type"] == "booking:updated"
    assert envelope["payload"] == {"id": "b1", "price": 500}
    assert envelope["schema_version"] == 1


def test_publisher_without_redis_is_a_no_op():
    RedisRealtimePublisher(None).publish("admin", "booking:updated", {})


def test_side_effects_swallow_and_report_failures(notifier, publisher):
    notifier.fail = True
    publisher.fail = True
    effects = SideEffects(notifier, publisher)

    assert effects.notify("u1", "BOOKING_ACCEPTED", "t", "m") is False
    assert effects.publish_to_admins("booking:updated", {}) is False


def test_notify_many_dedupes_and_skips_empty(notifier, publisher):
    effects = SideEffects(notifier, publisher)
    delivered = effects.notify_many(["a", None, "b", "a", ""], "NEW_REVIEW", "t", "m")
    assert delivered == 2
    assert [n["recipient_id"] for n in notifier.sent] == ["a", "b"]


def test_notifier_failure_is_counted(monkeypatch, publisher):
    failing = MagicMock()
    failing.send.side_effect = RuntimeError("smtp down")
    recorded = []
    monkeypatch.setattr(
        "homefix.services.side_effects.prometheus_metrics.record_side_effect_failure",
        lambda channel: recorded.append(channel),
    )

    SideEffects(failing, publisher).notify("u1", "BOOKING_ACCEPTED", "t", "m")
    assert recorded == ["notification"]
