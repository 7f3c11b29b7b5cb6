"""Dependency injection for FastAPI"""

from typing import Optional
import asyncpg

from pool_metrics.api import CachedPriceStore, RedisPriceStore, SuiClient
from pool_metrics.services import JobScheduler

# Global connections (will be initialized by app lifespan)
db_pool: Optional[asyncpg.Pool] = None
price_store: Optional[RedisPriceStore] = None
cached_store: Optional[CachedPriceStore] = None
sui_client: Optional[SuiClient] = None
scheduler: Optional[JobScheduler] = None


async def get_scheduler() -> JobScheduler:
    """Get job scheduler"""
    if not scheduler:
        raise RuntimeError("Scheduler not initialized")
    return scheduler


async def get_cached_store() -> CachedPriceStore:
    """Get cached price store"""
    if not cached_store:
        raise RuntimeError("Price store not initialized")
    return cached_store
