"""Best-effort Redis cache for Hostaway listing responses.

A cache failure never fails a sync: reads fall through to a live fetch, writes are dropped.
"""
from __future__ import annotations

import json
import logging
from typing import Any

import redis

logger = logging.getLogger("uvicorn.error")


def listings_cache_key(account_id: str) -> str:
    return f"hostaway:{account_id}:listings"


class ListingsCache:
    def __init__(self, client: redis.Redis, ttl_seconds: int = 3600):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int = 3600) -> "ListingsCache | None":
        """Build a cache from REDIS_URL; None when no URL is configured."""
        if not url:
            return None
        return cls(redis.Redis.from_url(url, socket_timeout=2.0), ttl_seconds=ttl_seconds)

    def get(self, key: str) -> Any | None:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning("Listings cache read failed for %s, fetching live: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Listings cache entry %s is not valid JSON, ignoring it", key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.setex(key, self.ttl_seconds, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning("Listings cache write failed for %s: %s", key, e)
