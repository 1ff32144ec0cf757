# cache.py

import json
import logging
import re
from typing import Any, List, Optional

import redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "recommendations"

# Characters with special meaning in a Redis SCAN MATCH pattern
_GLOB_SPECIAL_RE = re.compile(r"([\\*?\[\]])")


def escape_glob(value: str) -> str:
    return _GLOB_SPECIAL_RE.sub(r"\\\1", value)


class RecommendationCache:
    """
    Caches ranked video id lists in Redis.

    Keys embed the catalog version and the user's watch-history version, so
    any change to either makes old entries unreachable; they then expire
    through the TTL. invalidate_user() only frees that memory early.
    Redis failures and unreadable values are logged and treated as misses.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = 3600):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_url(cls, url: Optional[str], ttl_seconds: int = 3600) -> Optional["RecommendationCache"]:
        if not url:
            logger.info("REDIS_URL not set. Recommendation cache disabled.")
            return None
        try:
            client = redis.from_url(url, decode_responses=True)
            client.ping()
            logger.info("Connection to Redis established successfully.")
        except redis.exceptions.ConnectionError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            return None
        return cls(client, ttl_seconds=ttl_seconds)

    @staticmethod
    def make_key(user_id: str, bucket: str, limit: int,
                 catalog_version: str, history_version: str) -> str:
        return f"{KEY_PREFIX}:{user_id}:{bucket}:{limit}:{catalog_version}:{history_version}"

    def get(self, key: str) -> Optional[List[Any]]:
        try:
            value = self.client.get(key)
        except redis.exceptions.RedisError as e:
            logger.error("Failed to read recommendation cache key %s: %s", key, e)
            return None
        if value is None:
            return None
        try:
            video_ids = json.loads(value)
        except ValueError:
            logger.warning("Discarding unreadable recommendation cache value at %s", key)
            return None
        if not isinstance(video_ids, list):
            logger.warning("Discarding unexpected recommendation cache value at %s", key)
            return None
        return video_ids

    def set(self, key: str, video_ids: List[Any]) -> None:
        try:
            self.client.set(key, json.dumps(list(video_ids)), ex=self.ttl_seconds)
        except redis.exceptions.RedisError as e:
            logger.error("Failed to write recommendation cache key %s: %s", key, e)

    def invalidate_user(self, user_id: str) -> int:
        """Drops every cached list for the user. Returns the number of keys removed."""
        pattern = f"{KEY_PREFIX}:{escape_glob(user_id)}:*"
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if not keys:
                return 0
            return self.client.delete(*keys)
        except redis.exceptions.RedisError as e:
            logger.error("Failed to invalidate recommendations for user %s: %s", user_id, e)
            return 0
