import redis
import json
import logging
from typing import Optional, Any
import os

logger = logging.getLogger(__name__)


class RedisService:
    """
    Best-effort JSON cache. Every call is a no-op when REDIS_URL is unset
    or the server can't be reached, and cache errors never fail a scan.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[Any] = None):
        self.redis_url = redis_url or os.getenv("REDIS_URL")
        self.client = client
        if self.client is not None:
            return
        if self.redis_url:
            try:
                self.client = redis.from_url(self.redis_url, decode_responses=True)
                # Test connection
                self.client.ping()
                logger.info("Connected to Redis for block caching.")
            except (redis.RedisError, ValueError) as e:
                # ValueError: malformed URL, e.g. missing the redis:// scheme
                logger.warning(f"Failed to connect to Redis: {e}. Caching disabled.")
                self.client = None
        else:
            logger.info("REDIS_URL not set. Caching disabled.")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def get(self, key: str) -> Optional[Any]:
        if not self.client:
            return None
        try:
            data = self.client.get(key)
            if data:
                return json.loads(data)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis get error: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: int = 60):
        if not self.client:
            return
        try:
            # Pydantic models carry their own serializer (Decimal -> str)
            if hasattr(value, "model_dump_json"):
                serialized = value.model_dump_json()
            else:
                serialized = json.dumps(value, default=str)

            self.client.setex(key, ttl_seconds, serialized)
        except redis.RedisError as e:
            logger.warning(f"Redis set error: {e}")

    def delete(self, key: str):
        if not self.client:
            return
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning(f"Redis delete error: {e}")
