"""SQL for the swap, summary and snapshot tables"""

from datetime import date
from enum import Enum
from typing import Any, Dict, List
import logging

import asyncpg

from .models import SUMMARY_METRICS

logger = logging.getLogger(__name__)


class UpsertMode(str, Enum):
    REPLACE = "replace"
    ADD = "add"


GET_ACTIVE_POOLS_SQL = """
    SELECT DISTINCT pool
    FROM cetus_swap
    WHERE "timestamp" >= $1 AND "timestamp" <= $2
"""

GET_ALL_POOLS_SQL = """
    SELECT DISTINCT pool
    FROM cetus_swap
"""

# tx_digest/event_id make OFFSET paging stable across equal timestamps
FETCH_SWAPS_SQL = """
    SELECT pool, amount_a_in, amount_b_in, amount_a_out, amount_b_out,
           fee_amount_a, fee_amount_b, "timestamp"
    FROM cetus_swap
    WHERE "timestamp" >= $1 AND "timestamp" <= $2
    ORDER BY "timestamp" ASC, tx_digest ASC, event_id ASC
    LIMIT $3 OFFSET $4
"""

INSERT_SNAPSHOT_SQL = """
    INSERT INTO cetus_liquidity_snapshot
        (pool, amount_a, amount_b, type_a, type_b, "timestamp", tvl)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
"""

PRUNE_SWAPS_SQL = 'DELETE FROM cetus_swap WHERE "timestamp" < $1'
PRUNE_SNAPSHOTS_SQL = 'DELETE FROM cetus_liquidity_snapshot WHERE "timestamp" < $1'
PRUNE_SUMMARIES_SQL = 'DELETE FROM cetus_swap_daily_summary WHERE date < $1'


def build_summary_upsert(mode: UpsertMode) -> str:
    """INSERT ... ON CONFLICT (pool, date) that replaces or adds every metric"""

    table = "cetus_swap_daily_summary"
    columns = ("pool", "date") + SUMMARY_METRICS
    placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))

    if mode == UpsertMode.REPLACE:
        assignments = [f"{col} = EXCLUDED.{col}" for col in SUMMARY_METRICS]
    else:
        assignments = [f"{col} = {table}.{col} + EXCLUDED.{col}" for col in SUMMARY_METRICS]

    return (
        f"INSERT INTO {table} ({', '.join(columns)})\n"
        f"VALUES ({placeholders})\n"
        f"ON CONFLICT (pool, date) DO UPDATE SET\n    "
        + ",\n    ".join(assignments)
    )


UPSERT_SUMMARY_SQL = {mode: build_summary_upsert(mode) for mode in UpsertMode}


def _deleted_count(status: str) -> int:
    # asyncpg returns the command tag, e.g. "DELETE 42"
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


class SwapRepository:
    """Persistence boundary for the aggregation, snapshot and prune jobs"""

    def __init__(self, db_pool: asyncpg.Pool):
        self.db = db_pool

    async def get_active_pools(self, start_ts: int, end_ts: int) -> List[str]:
        """Distinct pools with at least one swap in [start_ts, end_ts]"""
        async with self.db.acquire() as conn:
            rows = await conn.fetch(GET_ACTIVE_POOLS_SQL, start_ts, end_ts)
        return [row['pool'] for row in rows]

    async def get_all_pools(self) -> List[str]:
        async with self.db.acquire() as conn:
            rows = await conn.fetch(GET_ALL_POOLS_SQL)
        return [row['pool'] for row in rows]

    async def fetch_swaps_page(
        self,
        start_ts: int,
        end_ts: int,
        limit: int,
        offset: int
    ) -> List[asyncpg.Record]:
        async with self.db.acquire() as conn:
            return await conn.fetch(FETCH_SWAPS_SQL, start_ts, end_ts, limit, offset)

    async def upsert_daily_summary(
        self,
        pool: str,
        summary_date: date,
        totals: Dict[str, Any],
        mode: UpsertMode
    ):
        values = [totals[col] for col in SUMMARY_METRICS]
        async with self.db.acquire() as conn:
            await conn.execute(UPSERT_SUMMARY_SQL[mode], pool, summary_date, *values)

    async def insert_liquidity_snapshot(self, record: Dict[str, Any]):
        async with self.db.acquire() as conn:
            await conn.execute(
                INSERT_SNAPSHOT_SQL,
                record['pool'],
                record['amount_a'],
                record['amount_b'],
                record['type_a'],
                record['type_b'],
                record['timestamp'],
                record['tvl']
            )

    async def prune_swaps(self, before_ts: int) -> int:
        async with self.db.acquire() as conn:
            return _deleted_count(await conn.execute(PRUNE_SWAPS_SQL, before_ts))

    async def prune_snapshots(self, before_ts: int) -> int:
        async with self.db.acquire() as conn:
            return _deleted_count(await conn.execute(PRUNE_SNAPSHOTS_SQL, before_ts))

    async def prune_daily_summaries(self, before_date: date) -> int:
        async with self.db.acquire() as conn:
            return _deleted_count(await conn.execute(PRUNE_SUMMARIES_SQL, before_date))
