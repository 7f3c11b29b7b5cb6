"""Nearest-minute USD price resolution"""

import asyncio
from decimal import Decimal
from typing import Optional, Tuple
import logging

from pool_metrics.utils.token_decimals import parse_price

logger = logging.getLogger(__name__)

BUCKET_SECONDS = 60


def align_to_minute(timestamp: int) -> int:
    return timestamp - (timestamp % BUCKET_SECONDS)


def minute_buckets(timestamp: int) -> Tuple[int, int]:
    """The minute bucket at or before the timestamp and the one after it"""
    t0 = align_to_minute(timestamp)
    return t0, t0 + BUCKET_SECONDS


class PriceResolver:
    """Resolve a token price at an arbitrary second from minute samples"""

    def __init__(self, price_source):
        # Anything with `async get_price(token, minute_ts) -> Optional[str]`
        self.source = price_source

    async def _lookup(self, token_type: str, timestamp: int) -> Optional[Decimal]:
        try:
            raw = await self.source.get_price(token_type, timestamp)
        except Exception as e:
            logger.warning(f"Price lookup failed for {token_type} at {timestamp}: {e}")
            return None
        return parse_price(raw)

    async def resolve_price(self, token_type: str, timestamp: int) -> Optional[Decimal]:
        """Price from the closer of the two surrounding minute buckets.

        Ties go to the earlier bucket. A bucket that is missing or whose
        lookup failed is ignored.
        """

        t0, t1 = minute_buckets(timestamp)
        v0, v1 = await asyncio.gather(
            self._lookup(token_type, t0),
            self._lookup(token_type, t1)
        )

        if v0 is None and v1 is None:
            return None
        if v1 is None:
            return v0
        if v0 is None:
            return v1
        return v0 if abs(timestamp - t0) <= abs(t1 - timestamp) else v1
