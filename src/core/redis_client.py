"""Redis client factory for the access-token blocklist."""

import redis
from django.conf import settings

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return the process-wide Redis client built from ``settings.REDIS_URL``.

    Connection and socket timeouts are short so an outage surfaces quickly as
    ``BlocklistUnavailable`` instead of hanging the request.
    """

    global _client
    if _client is None:
        _client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    return _client


def reset_redis_client() -> None:
    """Drop the cached client, e.g. after ``REDIS_URL`` changes in tests."""

    global _client
    _client = None


__all__ = ["get_redis_client", "reset_redis_client"]
