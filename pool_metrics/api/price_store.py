from typing import Optional
import logging

import redis.asyncio as aioredis

from config import get_redis_url

logger = logging.getLogger(__name__)

PRICE_KEY = "token:historical-price:{token}:{timestamp}"
DECIMALS_KEY = "token:decimals:{token}"


class RedisPriceStore:
    """Read-only access to minute prices and coin decimals kept in Redis"""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        redis_client: Optional[aioredis.Redis] = None
    ):
        self.redis_url = redis_url or get_redis_url()
        self.redis: Optional[aioredis.Redis] = redis_client

    async def connect(self):
        """Connect to Redis"""
        if self.redis is None:
            self.redis = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True
            )
        await self.redis.ping()
        logger.info("[Redis] Price store connected")

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.redis:
            await self.redis.aclose()

    def _require_client(self) -> aioredis.Redis:
        if not self.redis:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self.redis

    async def get_price(self, token_type: str, timestamp: int) -> Optional[str]:
        """Price string for a token at a minute-aligned timestamp"""

        key = PRICE_KEY.format(token=token_type, timestamp=timestamp)
        try:
            return await self._require_client().get(key)
        except Exception as e:
            logger.error(f"[Redis] Failed to get price for key {key}: {e}")
            raise

    async def get_decimals(self, token_type: str) -> Optional[int]:
        """Decimal precision of a coin type"""

        key = DECIMALS_KEY.format(token=token_type)
        try:
            raw = await self._require_client().get(key)
        except Exception as e:
            logger.error(f"[Redis] Failed to get decimals for key {key}: {e}")
            raise

        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning(f"[Redis] Invalid decimals value {raw!r} for {token_type}")
            return None

    async def ping(self) -> bool:
        return bool(await self._require_client().ping())
