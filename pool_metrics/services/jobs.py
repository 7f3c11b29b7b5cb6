from typing import Any, Dict
import logging

from config import settings
from .scheduler import JobScheduler

logger = logging.getLogger(__name__)


async def sui_heartbeat(sui_client) -> Dict[str, Any]:
    """Check that the Sui RPC endpoint still answers"""
    try:
        chain_id = await sui_client.get_chain_identifier()
    except Exception:
        logger.error("[Heartbeat] Sui RPC connection lost.")
        raise
    return {'chain_identifier': chain_id}


def create_scheduler(
    aggregation_engine,
    liquidity_engine,
    pruner,
    sui_client
) -> JobScheduler:
    """Scheduler with the aggregation, liquidity, prune and heartbeat jobs"""

    scheduler = JobScheduler()
    scheduler.register(
        "aggregation",
        aggregation_engine.run_daily_aggregation,
        settings.AGGREGATION_INTERVAL_SECONDS
    )
    scheduler.register(
        "liquidity",
        liquidity_engine.run_liquidity_snapshot,
        settings.SNAPSHOT_INTERVAL_SECONDS
    )
    scheduler.register(
        "prune",
        pruner.run_pruning,
        settings.PRUNE_INTERVAL_SECONDS
    )
    scheduler.register(
        "heartbeat",
        lambda: sui_heartbeat(sui_client),
        settings.HEARTBEAT_INTERVAL_SECONDS,
        run_on_start=False
    )
    return scheduler
