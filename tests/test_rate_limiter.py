from unittest.mock import MagicMock

from app.rate_limiter import check_rate_limit


def _client(count):
    pipe = MagicMock()
    pipe.execute.return_value = [count, True]
    client = MagicMock()
    client.pipeline.return_value = pipe
    return client, pipe


def test_request_within_budget():
    client, pipe = _client(3)

    allowed, count, ttl = check_rate_limit("chat:user-1", limit=5, window_seconds=60, client=client)

    assert allowed is True
    assert count == 3
    assert 0 < ttl <= 60
    pipe.expire.assert_called_once()


def test_request_over_budget():
    client, _ = _client(6)

    allowed, count, _ = check_rate_limit("chat:user-1", limit=5, window_seconds=60, client=client)

    assert allowed is False
    assert count == 6


def test_window_key_is_per_user():
    client, pipe = _client(1)

    check_rate_limit("chat:user-1", limit=5, window_seconds=60, client=client)

    key = pipe.incr.call_args.args[0]
    assert key.startswith("chat:user-1:")
