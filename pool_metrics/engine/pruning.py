import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from config import settings

logger = logging.getLogger(__name__)


class RetentionPruner:
    """Deletes swap, snapshot and summary rows past their retention"""

    def __init__(
        self,
        repository,
        swap_retention_seconds: Optional[int] = None,
        snapshot_retention_seconds: Optional[int] = None,
        summary_retention_days: Optional[int] = None
    ):
        self.repository = repository
        self.swap_retention = swap_retention_seconds or settings.SWAP_RETENTION_SECONDS
        self.snapshot_retention = snapshot_retention_seconds or settings.SNAPSHOT_RETENTION_SECONDS
        self.summary_retention_days = (
            settings.SUMMARY_RETENTION_DAYS if summary_retention_days is None
            else summary_retention_days
        )

    async def run_pruning(self, now: Optional[int] = None) -> Dict[str, Any]:
        started = time.monotonic()
        now_ts = int(time.time()) if now is None else int(now)
        today = datetime.fromtimestamp(now_ts, tz=timezone.utc).date()

        result: Dict[str, Any] = {
            'swap_cutoff': now_ts - self.swap_retention,
            'snapshot_cutoff': now_ts - self.snapshot_retention,
            'summary_cutoff': today - timedelta(days=self.summary_retention_days),
            'swaps': 0,
            'snapshots': 0,
            'summaries': 0,
            'error': None
        }

        logger.info("[Prune] START data pruning job")
        try:
            result['swaps'] = await self.repository.prune_swaps(result['swap_cutoff'])
            result['snapshots'] = await self.repository.prune_snapshots(result['snapshot_cutoff'])
            result['summaries'] = await self.repository.prune_daily_summaries(result['summary_cutoff'])
            logger.info(
                f"[Prune] Pruned {result['swaps']} swaps, {result['snapshots']} snapshots, "
                f"{result['summaries']} daily summaries"
            )
        except Exception as e:
            logger.error(f"[Prune] CRITICAL: database pruning failed: {e}")
            result['error'] = str(e)

        result['duration_ms'] = int((time.monotonic() - started) * 1000)
        logger.info(f"[Prune] END data pruning job. Duration: {result['duration_ms']}ms")
        return result
