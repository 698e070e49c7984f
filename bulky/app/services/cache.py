"""
Redis Cache Service for region (wilayah) reference data.
Provides TTL-based caching for provinces, cities, districts and sub-districts.
"""
import json
import uuid
from typing import Optional, Any, List
from redis.asyncio import Redis

from bulky.app.core.settings import get_settings


class CacheService:
    """Service for caching operations using Redis."""

    _redis: Optional[Redis] = None

    TTL_WILAYAH = 3600         # 1 hour - regions rarely change
    TTL_DEFAULT = 300

    KEY_PROVINSI = "wilayah:provinsi"
    # Child lists are keyed by parent: wilayah:kota:<provinsi_id>, ...
    KEY_CHILDREN = "wilayah:{level}:{parent_id}"

    @classmethod
    async def get_redis(cls) -> Redis:
        """Get or create Redis connection."""
        if cls._redis is None:
            settings = get_settings()
            cls._redis = Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                decode_responses=True
            )
        return cls._redis

    @classmethod
    async def close(cls):
        """Close Redis connection."""
        if cls._redis:
            await cls._redis.aclose()
            cls._redis = None

    def __init__(self, redis: Redis):
        self.redis = redis

    async def get(self, key: str) -> Optional[Any]:
        data = await self.redis.get(key)
        if data:
            return json.loads(data)
        return None

    async def set(self, key: str, value: Any, ttl: int = TTL_DEFAULT):
        await self.redis.set(key, json.dumps(value, ensure_ascii=False, default=str), ex=ttl)

    async def delete(self, key: str):
        await self.redis.delete(key)

    async def delete_pattern(self, pattern: str):
        """Delete all keys matching pattern."""
        keys = [key async for key in self.redis.scan_iter(match=pattern)]
        if keys:
            await self.redis.delete(*keys)

    # ----- Region lists -----

    async def get_provinsi(self) -> Optional[List[dict]]:
        return await self.get(self.KEY_PROVINSI)

    async def set_provinsi(self, items: List[dict]):
        await self.set(self.KEY_PROVINSI, items, self.TTL_WILAYAH)

    async def get_children(self, level: str, parent_id: uuid.UUID) -> Optional[List[dict]]:
        """Cached kota/kecamatan/kelurahan list of one parent."""
        return await self.get(self.KEY_CHILDREN.format(level=level, parent_id=parent_id))

    async def set_children(self, level: str, parent_id: uuid.UUID, items: List[dict]):
        await self.set(self.KEY_CHILDREN.format(level=level, parent_id=parent_id), items, self.TTL_WILAYAH)

    async def invalidate_wilayah(self, level: str, parent_id: Optional[uuid.UUID] = None):
        """Drop the cached list a write to ``level`` affects."""
        if level == "provinsi":
            await self.delete(self.KEY_PROVINSI)
        elif parent_id is not None:
            await self.delete(self.KEY_CHILDREN.format(level=level, parent_id=parent_id))
        else:
            await self.delete_pattern(f"wilayah:{level}:*")
