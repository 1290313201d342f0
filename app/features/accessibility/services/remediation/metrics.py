from typing import Dict, Optional

from redis.asyncio import Redis

from app.platform.cache.redis import get_redis
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class RedisRemediationMetrics:
    """
    Sent/received counters per opportunity and page.

    One hash per opportunity, `a11y:remediation:{opportunity_id}`, with fields
    `sent:{url}` (requests published) and `received:{url}` (suggestions reconciled
    from the last guidance reply).
    """

    def __init__(self, redis: Optional[Redis] = None, ttl_seconds: Optional[int] = None):
        self._redis = redis
        self.ttl_seconds = ttl_seconds or settings.A11Y_METRICS_TTL_SECONDS

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    @staticmethod
    def key(opportunity_id: str) -> str:
        return f"a11y:remediation:{opportunity_id}"

    async def record_sent(self, opportunity_id: str, page_url: str, count: int = 1) -> None:
        key = self.key(opportunity_id)
        await self.redis.hincrby(key, f"sent:{page_url}", count)
        await self.redis.expire(key, self.ttl_seconds)

    async def record_received(self, opportunity_id: str, page_url: str, received: int) -> Dict[str, int]:
        key = self.key(opportunity_id)
        await self.redis.hset(key, f"received:{page_url}", received)
        await self.redis.expire(key, self.ttl_seconds)

        sent = await self.redis.hget(key, f"sent:{page_url}")
        metrics = {"sent": int(sent or 0), "received": received}
        logger.debug(f"[A11yRemediationGuidance] Metrics for {opportunity_id} {page_url}: {metrics}")
        return metrics
