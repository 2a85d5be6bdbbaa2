# ============================================================================
# Application Context
# ============================================================================
"""
Process-wide state for one application instance.

Holds the settings, the database connection pool and the optional Redis
cache. ``create_app`` builds a context and stores it on ``app.state``;
the lifespan handler calls ``startup`` and ``shutdown``. Nothing here is
mutated after startup.
"""
from dataclasses import dataclass, field
from typing import Optional
import logging
import time

from app.config import Settings
from app.core.database import Database
from app.core.redis import RedisCache

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    database: Database
    cache: Optional[RedisCache] = None
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        database = Database(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
        )
        cache = RedisCache.from_url(settings.REDIS_URL) if settings.RATE_LIMIT_ENABLED else None
        return cls(settings=settings, database=database, cache=cache)

    @property
    def uptime(self) -> float:
        return round(time.monotonic() - self.started_at, 3)

    async def startup(self) -> None:
        try:
            await self.database.create_all()
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

        # Redis is optional - rate limiting is switched off if it is unreachable
        if self.cache is not None:
            try:
                await self.cache.ping()
                logger.info("Redis connected, rate limiting enabled")
            except Exception as e:
                logger.warning(f"Redis connection failed, rate limiting disabled: {e}")
                self.cache = None

    async def shutdown(self) -> None:
        if self.cache is not None:
            await self.cache.close()
        await self.database.dispose()
        logger.info("Database connection closed")
