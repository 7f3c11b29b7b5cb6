import asyncio
import time
from typing import Dict, Iterable, Optional, Tuple
import logging

from config import settings
from pool_metrics.dex import CetusPoolParser

logger = logging.getLogger(__name__)


class PoolMetadataResolver:
    """Resolve pool coin types from chain metadata, one request at a time"""

    def __init__(
        self,
        sui_client,
        min_interval: Optional[float] = None,
        parser: Optional[CetusPoolParser] = None
    ):
        self.sui = sui_client
        self.min_interval = settings.RPC_MIN_INTERVAL if min_interval is None else min_interval
        self.parser = parser or CetusPoolParser()
        self._last_call: Optional[float] = None

    async def _throttle(self):
        """Keep at least min_interval seconds between RPC requests"""
        if self._last_call is not None and self.min_interval > 0:
            remaining = self.min_interval - (time.monotonic() - self._last_call)
            if remaining > 0:
                await asyncio.sleep(remaining)
        self._last_call = time.monotonic()

    async def resolve_pool_types(self, pool_id: str) -> Optional[Tuple[str, str]]:
        """(type_a, type_b) for a pool, None when metadata is absent or malformed"""

        await self._throttle()
        response = await self.sui.get_object(pool_id, show_type=True, show_content=False)

        types = self.parser.parse_types(response)
        if types is None:
            logger.warning(f"Could not resolve coin types for pool {pool_id}")
        return types

    async def resolve_many(self, pool_ids: Iterable[str]) -> Dict[str, Tuple[str, str]]:
        """Pool -> types map; pools that fail to resolve are left out"""

        pool_types: Dict[str, Tuple[str, str]] = {}
        for pool_id in pool_ids:
            try:
                types = await self.resolve_pool_types(pool_id)
            except Exception as e:
                logger.error(f"Error fetching metadata for pool {pool_id}: {e}")
                continue
            if types:
                pool_types[pool_id] = types
        return pool_types
