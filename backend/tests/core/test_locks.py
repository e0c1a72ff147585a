from unittest.mock import MagicMock

import pytest

from homefix.core import locks


@pytest.fixture
def redis_client(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(locks, "_get_sync_redis", lambda: client)
    return client


def test_keys():
    assert locks.booking_lock_key("b1") == "booking:b1:mutex"
    assert locks.rating_lock_key("technician", "t1") == "rating:technician:t1"


def test_acquire_uses_set_nx_with_ttl(redis_client):
    redis_client.set.return_value = True

    assert locks.acquire_lock_sync("booking:b1:mutex", ttl_s=90, scope="booking") is True

    args, kwargs = redis_client.set.call_args
    assert args[0] == "homefix:lock:booking:b1:mutex"
    assert kwargs == {"nx": True, "ex": 90}


def test_held_lock_is_not_acquired(redis_client):
    redis_client.set.return_value = None
    assert locks.acquire_lock_sync("booking:b1:mutex", ttl_s=90, scope="booking") is False


def test_redis_errors_fail_open(redis_client):
    redis_client.set.side_effect = ConnectionError("down")
    assert locks.acquire_lock_sync("booking:b1:mutex", ttl_s=90, scope="booking") is True


def test_no_redis_fails_open(monkeypatch):
    monkeypatch.setattr(locks, "_get_sync_redis", lambda: None)
    with locks.booking_lock_sync("b1") as acquired:
        assert acquired is True


def test_context_manager_releases_with_own_token(redis_client):
    redis_client.set.return_value = True
    redis_client.eval.return_value = 1
    with locks.booking_lock_sync("b1") as acquired:
        assert acquired
        redis_client.eval.assert_not_called()

    stored_token = redis_client.set.call_args.args[1]
    script, numkeys, key, token = redis_client.eval.call_args.args
    assert (numkeys, key, token) == (1, "homefix:lock:booking:b1:mutex", stored_token)
    assert "del" in script
    redis_client.delete.assert_not_called()


def test_each_holder_gets_a_distinct_token(redis_client):
    redis_client.set.return_value = True
    with locks.booking_lock_sync("b1"):
        pass
    with locks.booking_lock_sync("b1"):
        pass
    first, second = (c.args[1] for c in redis_client.set.call_args_list)
    assert first != second


def test_expired_holder_does_not_release_new_owner(redis_client):
    # The key expired and was taken by another holder, so the token check fails
    redis_client.set.return_value = True
    redis_client.eval.return_value = 0
    with locks.booking_lock_sync("b1") as acquired:
        assert acquired
    redis_client.eval.assert_called_once()
    redis_client.delete.assert_not_called()


def test_unacquired_lock_is_not_released(redis_client):
    redis_client.set.return_value = None
    with locks.booking_lock_sync("b1") as acquired:
        assert acquired is False
    redis_client.eval.assert_not_called()


def test_rating_lock_waits_then_gives_up(redis_client):
    redis_client.set.return_value = None
    with locks.rating_lock_sync("technician", "t1", wait_s=0.12) as acquired:
        assert acquired is False
    assert redis_client.set.call_count >= 2


def test_rating_lock_acquired_after_wait(redis_client):
    redis_client.set.side_effect = [None, None, True]
    with locks.rating_lock_sync("service", "s1", wait_s=1.0) as acquired:
        assert acquired is True
    tokens = {c.args[1] for c in redis_client.set.call_args_list}
    assert len(tokens) == 1
    assert redis_client.eval.call_args.args[2:] == ("homefix:lock:rating:service:s1", tokens.pop())
