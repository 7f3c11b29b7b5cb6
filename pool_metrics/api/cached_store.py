from typing import Any, Dict, Optional
import logging

from pool_metrics.utils.lookup_cache import BoundedLookupCache

logger = logging.getLogger(__name__)


class CachedPriceStore:
    """Price store fronted by bounded in-process caches.

    Misses are cached too, so a fact that is permanently absent is looked up
    once per cache lifetime. Exceptions from the underlying store are not
    cached and propagate to the caller.
    """

    def __init__(
        self,
        price_store,
        price_cache: BoundedLookupCache,
        decimals_cache: BoundedLookupCache
    ):
        self.store = price_store
        self.price_cache = price_cache
        self.decimals_cache = decimals_cache

    async def get_price(self, token_type: str, timestamp: int) -> Optional[str]:
        key = ("price", token_type, timestamp)
        if self.price_cache.has(key):
            return self.price_cache.get(key)

        price = await self.store.get_price(token_type, timestamp)
        self.price_cache.set(key, price)
        return price

    async def get_decimals(self, token_type: str) -> Optional[int]:
        key = ("decimals", token_type)
        if self.decimals_cache.has(key):
            return self.decimals_cache.get(key)

        decimals = await self.store.get_decimals(token_type)
        self.decimals_cache.set(key, decimals)
        return decimals

    def stats(self) -> Dict[str, Any]:
        return {
            'prices': self.price_cache.stats(),
            'decimals': self.decimals_cache.stats()
        }
