from typing import Any, Optional

from redis.asyncio import Redis

from app.platform.cache.redis import get_redis
from app.platform.config import settings


class RedisFeatureFlags:
    """
    A flag is on for a site when it is enabled globally (A11Y_ENABLED_FEATURES)
    or the site id is a member of the Redis set `a11y:flags:{flag}`.
    """

    def __init__(self, redis: Optional[Redis] = None):
        self._redis = redis

    @property
    def redis(self) -> Redis:
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    @staticmethod
    def key(flag_name: str) -> str:
        return f"a11y:flags:{flag_name}"

    async def is_audit_enabled_for_site(self, flag_name: str, site: Any) -> bool:
        if flag_name in settings.enabled_features:
            return True

        site_id = getattr(site, "id", None)
        if not site_id:
            return False

        return bool(await self.redis.sismember(self.key(flag_name), site_id))

    async def enable_for_site(self, flag_name: str, site_id: str) -> None:
        await self.redis.sadd(self.key(flag_name), site_id)

    async def disable_for_site(self, flag_name: str, site_id: str) -> None:
        await self.redis.srem(self.key(flag_name), site_id)
