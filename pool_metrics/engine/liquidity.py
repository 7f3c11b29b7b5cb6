import time
from typing import Any, Dict, List, Optional
import logging

from config import settings
from pool_metrics.api.sui_client import MAX_MULTI_GET_IDS
from pool_metrics.dex import CetusPoolParser
from .valuation import MissingDecimalsError, Valuator

logger = logging.getLogger(__name__)


class LiquiditySnapshotEngine:
    """Values current pool reserves and appends one TVL row per pool"""

    def __init__(
        self,
        repository,
        sui_client,
        valuator: Valuator,
        batch_size: Optional[int] = None,
        parser: Optional[CetusPoolParser] = None
    ):
        self.repository = repository
        self.sui = sui_client
        self.valuator = valuator
        self.batch_size = min(batch_size or settings.MULTI_GET_BATCH_SIZE, MAX_MULTI_GET_IDS)
        self.parser = parser or CetusPoolParser()

    async def run_liquidity_snapshot(self, now: Optional[int] = None) -> Dict[str, Any]:
        started = time.monotonic()
        current_ts = int(time.time()) if now is None else int(now)

        result: Dict[str, Any] = {
            'timestamp': current_ts,
            'pools': 0,
            'batches': 0,
            'saved': 0,
            'skipped': 0,
            'failed': 0,
            'error': None
        }

        try:
            pool_ids = await self.repository.get_all_pools()
            result['pools'] = len(pool_ids)
            logger.info(f"[Liquidity] Found {len(pool_ids)} unique pools to process")

            for i in range(0, len(pool_ids), self.batch_size):
                batch = pool_ids[i:i + self.batch_size]
                await self._process_batch(batch, current_ts, result)
                result['batches'] += 1

        except Exception as e:
            logger.error(f"[Liquidity] CRITICAL: snapshot job failed: {e}")
            result['error'] = str(e)

        result['duration_ms'] = int((time.monotonic() - started) * 1000)
        logger.info(
            f"[Liquidity] Snapshot complete: saved={result['saved']} "
            f"skipped={result['skipped']} failed={result['failed']} "
            f"duration={result['duration_ms']}ms"
        )
        return result

    async def _process_batch(self, batch: List[str], current_ts: int, result: Dict[str, Any]):
        try:
            responses = await self.sui.multi_get_objects(batch, show_type=True, show_content=True)
        except Exception as e:
            logger.error(f"[Liquidity] multiGetObjects failed for batch of {len(batch)}: {e}")
            result['failed'] += len(batch)
            return

        for response in responses:
            try:
                pool = self.parser.parse_pool(response)
                if pool is None:
                    result['skipped'] += 1
                    continue

                record = await self.build_snapshot(pool, current_ts)
                await self.repository.insert_liquidity_snapshot(record)
                result['saved'] += 1

            except MissingDecimalsError as e:
                logger.error(f"[Liquidity] Skipping pool: {e}")
                result['failed'] += 1
            except Exception as e:
                logger.error(f"[Liquidity] Error processing pool snapshot: {e}")
                result['failed'] += 1

    async def build_snapshot(self, pool: Dict[str, Any], current_ts: int) -> Dict[str, Any]:
        """Snapshot row for a parsed pool, TVL valued at current_ts"""

        tvl = await self.valuator.value_position(
            (pool['type_a'], pool['type_b']),
            pool['amount_a'],
            pool['amount_b'],
            current_ts
        )
        return {
            'pool': pool['pool'],
            'amount_a': pool['amount_a'],
            'amount_b': pool['amount_b'],
            'type_a': pool['type_a'],
            'type_b': pool['type_b'],
            'timestamp': current_ts,
            'tvl': tvl
        }
