# ============================================================================
# Redis Connection
# ============================================================================
import redis.asyncio as redis

class RedisCache:
    """Redis helper used for request rate limiting"""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        return cls(redis.from_url(url, encoding="utf-8", decode_responses=True))

    async def ping(self) -> bool:
        return await self.client.ping()

    async def close(self) -> None:
        await self.client.aclose()

    # Rate limiting
    async def check_rate_limit(self, key: str, limit: int, window: int = 900) -> tuple[bool, int]:
        """Check if rate limit exceeded. Returns (allowed, remaining)"""
        current = await self.client.get(key)
        if current is None:
            await self.client.setex(key, window, 1)
            return True, limit - 1

        current = int(current)
        if current >= limit:
            return False, 0

        await self.client.incr(key)
        return True, limit - current - 1
