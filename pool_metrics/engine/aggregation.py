"""Daily per-pool swap aggregation"""

import time
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence, Tuple
import logging

from config import settings
from pool_metrics.data.models import SUMMARY_METRICS
from pool_metrics.data.repository import UpsertMode
from pool_metrics.utils.token_decimals import to_decimal
from .pool_metadata import PoolMetadataResolver
from .valuation import MissingDecimalsError, SwapAmounts, Valuator

logger = logging.getLogger(__name__)


def _empty_totals() -> Dict[str, Any]:
    totals: Dict[str, Any] = {col: Decimal(0) for col in SUMMARY_METRICS}
    totals['swap_count'] = 0
    return totals


class AggregationEngine:
    """Aggregates swaps of a locked 24h window into daily pool summaries.

    Rows are processed in pages. Each page's per-pool totals are written
    right away: the first page of a run replaces the (pool, date) summary,
    every later page adds to it. Nothing is carried between pages in
    memory, so a clean run rebuilds the day regardless of page size.
    """

    def __init__(
        self,
        repository,
        pool_resolver: PoolMetadataResolver,
        valuator: Valuator,
        page_size: Optional[int] = None,
        window_seconds: Optional[int] = None
    ):
        self.repository = repository
        self.pool_resolver = pool_resolver
        self.valuator = valuator
        self.page_size = page_size or settings.SWAP_PAGE_SIZE
        self.window_seconds = window_seconds or settings.AGGREGATION_WINDOW_SECONDS

    def lock_window(self, now: Optional[int] = None) -> Tuple[int, int]:
        now_ts = int(time.time()) if now is None else int(now)
        end_ts = now_ts - 1
        return end_ts - self.window_seconds, end_ts

    async def run_daily_aggregation(self, now: Optional[int] = None) -> Dict[str, Any]:
        """Run one aggregation pass; never raises, returns what was done"""

        started = time.monotonic()
        start_ts, end_ts = self.lock_window(now)
        summary_date = datetime.fromtimestamp(end_ts, tz=timezone.utc).date()

        result: Dict[str, Any] = {
            'start_ts': start_ts,
            'end_ts': end_ts,
            'summary_date': summary_date,
            'pool_types': {},
            'pages': 0,
            'rows': 0,
            'aggregated_rows': 0,
            'skipped_rows': 0,
            'failed_rows': 0,
            'unpriced_rows': 0,
            'upserts': 0,
            'failed_upserts': 0,
            'error': None
        }

        logger.info(f"[Aggregation] START window {start_ts}..{end_ts} ({summary_date})")

        try:
            pools = await self.repository.get_active_pools(start_ts, end_ts)
            logger.info(f"[Aggregation] {len(pools)} active pools in window")

            pool_types = await self.pool_resolver.resolve_many(pools)
            result['pool_types'] = pool_types
            if len(pool_types) < len(pools):
                logger.warning(
                    f"[Aggregation] {len(pools) - len(pool_types)} pools without "
                    f"resolvable types are excluded from this run"
                )

            offset = 0
            is_first_page = True
            while True:
                rows = await self.repository.fetch_swaps_page(
                    start_ts, end_ts, self.page_size, offset
                )
                if not rows:
                    break

                page_totals = await self._aggregate_page(rows, pool_types, result)
                mode = UpsertMode.REPLACE if is_first_page else UpsertMode.ADD
                await self._persist_page(page_totals, summary_date, mode, result)

                is_first_page = False
                offset += len(rows)
                result['pages'] += 1
                result['rows'] += len(rows)

        except Exception as e:
            logger.error(f"[Aggregation] Run aborted, keeping partial results: {e}")
            result['error'] = str(e)

        result['duration_ms'] = int((time.monotonic() - started) * 1000)
        logger.info(
            f"[Aggregation] END pages={result['pages']} rows={result['rows']} "
            f"aggregated={result['aggregated_rows']} skipped={result['skipped_rows']} "
            f"failed={result['failed_rows']} upserts={result['upserts']} "
            f"duration={result['duration_ms']}ms"
        )
        return result

    async def _aggregate_page(
        self,
        rows: Sequence[Any],
        pool_types: Dict[str, Tuple[str, str]],
        result: Dict[str, Any]
    ) -> Dict[str, Dict[str, Any]]:
        """Per-pool totals for one page of swap rows"""

        page_totals: Dict[str, Dict[str, Any]] = defaultdict(_empty_totals)

        for row in rows:
            pool_id = row['pool']
            types = pool_types.get(pool_id)
            if not types:
                result['skipped_rows'] += 1
                continue

            try:
                amounts = SwapAmounts(
                    to_decimal(row['amount_a_in']),
                    to_decimal(row['amount_b_in']),
                    to_decimal(row['amount_a_out']),
                    to_decimal(row['amount_b_out'])
                )
                fee_a = to_decimal(row['fee_amount_a'])
                fee_b = to_decimal(row['fee_amount_b'])
                valuation = await self.valuator.value_swap(
                    types, amounts, (fee_a, fee_b), int(row['timestamp'])
                )
            except MissingDecimalsError as e:
                logger.error(f"[Aggregation] Skipping swap in pool {pool_id}: {e}")
                result['failed_rows'] += 1
                continue
            except Exception as e:
                logger.error(f"[Aggregation] Failed to value swap in pool {pool_id}: {e}")
                result['failed_rows'] += 1
                continue

            if valuation.basis == "unpriced":
                result['unpriced_rows'] += 1

            totals = page_totals[pool_id]
            totals['total_a_in'] += amounts.a_in
            totals['total_a_out'] += amounts.a_out
            totals['total_b_in'] += amounts.b_in
            totals['total_b_out'] += amounts.b_out
            totals['total_usd'] += valuation.usd_value
            totals['total_fee_usd'] += valuation.usd_fee
            totals['total_fee_a'] += fee_a
            totals['total_fee_b'] += fee_b
            totals['swap_count'] += 1
            result['aggregated_rows'] += 1

        return page_totals

    async def _persist_page(
        self,
        page_totals: Dict[str, Dict[str, Any]],
        summary_date,
        mode: UpsertMode,
        result: Dict[str, Any]
    ):
        for pool_id, totals in page_totals.items():
            try:
                await self.repository.upsert_daily_summary(pool_id, summary_date, totals, mode)
                result['upserts'] += 1
            except Exception as e:
                logger.error(f"[Aggregation] {mode.value} upsert failed for pool {pool_id}: {e}")
                result['failed_upserts'] += 1
