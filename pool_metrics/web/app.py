"""FastAPI application hosting the pool metrics worker"""

from contextlib import asynccontextmanager
import logging

import asyncpg
import backoff
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from config import settings, get_database_url, get_redis_url, get_sui_rpc_url
from config.logging import setup_logging
from pool_metrics.api import CachedPriceStore, RedisPriceStore, SuiClient
from pool_metrics.data import SwapRepository
from pool_metrics.engine import (
    AggregationEngine,
    LiquiditySnapshotEngine,
    PoolMetadataResolver,
    PriceResolver,
    RetentionPruner,
    Valuator
)
from pool_metrics.services import create_scheduler
from pool_metrics.utils import BoundedLookupCache
from pool_metrics.utils.db_init import ensure_schema

# Setup logging
logger = setup_logging()

from . import dependencies


@backoff.on_exception(
    backoff.expo,
    (OSError, asyncpg.PostgresError),
    max_tries=3,
    max_value=10
)
async def create_db_pool() -> asyncpg.Pool:
    logger.info("Connecting to PostgreSQL")
    return await asyncpg.create_pool(
        get_database_url(),
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=settings.DB_COMMAND_TIMEOUT
    )


def build_worker(db_pool: asyncpg.Pool, price_store: RedisPriceStore, sui_client: SuiClient):
    """Wire caches, engines and the scheduler around live connections"""

    cached_store = CachedPriceStore(
        price_store,
        BoundedLookupCache(settings.PRICE_CACHE_CAPACITY, name="prices"),
        BoundedLookupCache(settings.DECIMALS_CACHE_CAPACITY, name="decimals")
    )
    repository = SwapRepository(db_pool)
    valuator = Valuator(PriceResolver(cached_store), cached_store)

    aggregation = AggregationEngine(
        repository,
        PoolMetadataResolver(sui_client),
        valuator
    )
    liquidity = LiquiditySnapshotEngine(repository, sui_client, valuator)
    pruner = RetentionPruner(repository)

    scheduler = create_scheduler(aggregation, liquidity, pruner, sui_client)
    return cached_store, scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""

    logger.info("--- Worker Application Startup ---")

    try:
        dependencies.db_pool = await create_db_pool()
        await ensure_schema(dependencies.db_pool)

        logger.info("Connecting to Redis")
        dependencies.price_store = RedisPriceStore(get_redis_url())
        await dependencies.price_store.connect()

        dependencies.sui_client = SuiClient(get_sui_rpc_url())
        await dependencies.sui_client.connect()

        dependencies.cached_store, dependencies.scheduler = build_worker(
            dependencies.db_pool,
            dependencies.price_store,
            dependencies.sui_client
        )

        if settings.ENABLE_SCHEDULER:
            dependencies.scheduler.start()

        logger.info("--- Worker Application Running ---")

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        logger.warning("Running in degraded mode - some services unavailable")

    yield

    logger.info("Shutting down pool metrics worker")

    try:
        if dependencies.scheduler:
            await dependencies.scheduler.stop()

        if dependencies.sui_client:
            await dependencies.sui_client.close()

        if dependencies.price_store:
            await dependencies.price_store.disconnect()

        if dependencies.db_pool:
            await dependencies.db_pool.close()

    except Exception as e:
        logger.error(f"Cleanup error: {e}")


app = FastAPI(
    title="Sui Pool Metrics Worker",
    description="Daily swap aggregation and liquidity snapshots for Cetus pools",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(RuntimeError)
async def not_initialized_handler(request, exc):
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc)}
    )


from .routes import router as jobs_router

app.include_router(jobs_router, tags=["jobs"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""

    health_status = {
        "status": "healthy",
        "database": "unknown",
        "redis": "unknown",
        "sui": "unknown",
        "scheduler": "running" if dependencies.scheduler and dependencies.scheduler.running else "stopped"
    }

    if dependencies.db_pool:
        try:
            async with dependencies.db_pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            health_status["database"] = "connected"
        except Exception:
            health_status["database"] = "disconnected"
            health_status["status"] = "degraded"
    else:
        health_status["status"] = "degraded"

    if dependencies.price_store:
        try:
            await dependencies.price_store.ping()
            health_status["redis"] = "connected"
        except Exception:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    else:
        health_status["status"] = "degraded"

    if dependencies.sui_client:
        try:
            await dependencies.sui_client.get_chain_identifier()
            health_status["sui"] = "connected"
        except Exception:
            health_status["sui"] = "disconnected"
            health_status["status"] = "degraded"
    else:
        health_status["status"] = "degraded"

    return health_status


@app.get("/")
async def root():
    return {
        "message": "Sui Pool Metrics Worker",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs"
    }
