"""Pytest configuration and fixtures"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pytest

from pool_metrics.api import CachedPriceStore
from pool_metrics.data import SUMMARY_METRICS, UpsertMode
from pool_metrics.engine import (
    AggregationEngine,
    LiquiditySnapshotEngine,
    PoolMetadataResolver,
    PriceResolver,
    Valuator
)
from pool_metrics.utils import BoundedLookupCache


SUI = "0x2::sui::SUI"
USDC = "0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC"
CETUS = "0x6864a6f921804860930db6ddbe2e16acdf8504495ea7481637a1c8b9a8fe54b::cetus::CETUS"
POOL_PACKAGE = "0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb"

# Fixed clock for engine runs
NOW = 1_700_000_000


def pool_type(type_a: str, type_b: str) -> str:
    return f"{POOL_PACKAGE}::pool::Pool<{type_a}, {type_b}>"


class FakeRepository:
    """In-memory stand-in for SwapRepository with the same upsert semantics"""

    def __init__(self, swaps: Optional[List[Dict[str, Any]]] = None):
        self.swaps: List[Dict[str, Any]] = list(swaps or [])
        self.summaries: Dict[Tuple[str, date], Dict[str, Any]] = {}
        self.snapshots: List[Dict[str, Any]] = []
        self.upsert_calls: List[Tuple[str, date, UpsertMode]] = []
        self.page_requests: List[Tuple[int, int]] = []
        self.fail_active_pools = False
        self.fail_upsert_for: set = set()

    async def get_active_pools(self, start_ts: int, end_ts: int) -> List[str]:
        if self.fail_active_pools:
            raise ConnectionError("database unavailable")
        return sorted({s['pool'] for s in self.swaps if start_ts <= s['timestamp'] <= end_ts})

    async def get_all_pools(self) -> List[str]:
        return sorted({s['pool'] for s in self.swaps})

    async def fetch_swaps_page(self, start_ts, end_ts, limit, offset):
        self.page_requests.append((limit, offset))
        rows = [s for s in self.swaps if start_ts <= s['timestamp'] <= end_ts]
        rows.sort(key=lambda s: (s['timestamp'], s['tx_digest'], s['event_id']))
        return rows[offset:offset + limit]

    async def upsert_daily_summary(self, pool, summary_date, totals, mode):
        if pool in self.fail_upsert_for:
            raise ConnectionError(f"upsert failed for {pool}")
        self.upsert_calls.append((pool, summary_date, mode))

        key = (pool, summary_date)
        current = self.summaries.get(key)
        if current is None or mode == UpsertMode.REPLACE:
            self.summaries[key] = {col: totals[col] for col in SUMMARY_METRICS}
        else:
            for col in SUMMARY_METRICS:
                current[col] += totals[col]

    async def insert_liquidity_snapshot(self, record):
        self.snapshots.append(dict(record))

    async def prune_swaps(self, before_ts):
        kept = [s for s in self.swaps if s['timestamp'] >= before_ts]
        deleted = len(self.swaps) - len(kept)
        self.swaps = kept
        return deleted

    async def prune_snapshots(self, before_ts):
        kept = [s for s in self.snapshots if s['timestamp'] >= before_ts]
        deleted = len(self.snapshots) - len(kept)
        self.snapshots = kept
        return deleted

    async def prune_daily_summaries(self, before_date):
        stale = [k for k in self.summaries if k[1] < before_date]
        for key in stale:
            del self.summaries[key]
        return len(stale)


class FakePriceStore:
    """Price/decimals source backed by dicts, counting lookups"""

    def __init__(
        self,
        prices: Optional[Dict[Tuple[str, int], str]] = None,
        decimals: Optional[Dict[str, int]] = None,
        constant_prices: Optional[Dict[str, str]] = None
    ):
        self.prices = dict(prices or {})
        self.decimals = dict(decimals or {})
        self.constant_prices = dict(constant_prices or {})
        self.price_calls: List[Tuple[str, int]] = []
        self.decimals_calls: List[str] = []
        self.failing_buckets: set = set()

    async def get_price(self, token_type: str, timestamp: int) -> Optional[str]:
        self.price_calls.append((token_type, timestamp))
        if (token_type, timestamp) in self.failing_buckets:
            raise ConnectionError("redis timeout")
        if (token_type, timestamp) in self.prices:
            return self.prices[(token_type, timestamp)]
        return self.constant_prices.get(token_type)

    async def get_decimals(self, token_type: str) -> Optional[int]:
        self.decimals_calls.append(token_type)
        return self.decimals.get(token_type)


class FakeSuiClient:
    """Serves canned object responses keyed by object id"""

    def __init__(self, objects: Optional[Dict[str, Dict[str, Any]]] = None):
        self.objects = dict(objects or {})
        self.get_object_calls: List[str] = []
        self.multi_get_calls: List[List[str]] = []
        self.failing_ids: set = set()

    def add_pool(self, pool_id: str, type_a: str, type_b: str, coin_a="0", coin_b="0"):
        object_type = pool_type(type_a, type_b)
        self.objects[pool_id] = {
            'data': {
                'objectId': pool_id,
                'type': object_type,
                'content': {
                    'dataType': 'moveObject',
                    'type': object_type,
                    'fields': {'coin_a': str(coin_a), 'coin_b': str(coin_b), 'id': {'id': pool_id}}
                }
            }
        }

    def _response(self, object_id: str) -> Dict[str, Any]:
        return self.objects.get(
            object_id,
            {'error': {'code': 'notExists', 'object_id': object_id}}
        )

    async def get_object(self, object_id, show_type=True, show_content=False):
        self.get_object_calls.append(object_id)
        if object_id in self.failing_ids:
            raise ConnectionError("rpc unavailable")
        return self._response(object_id)

    async def multi_get_objects(self, object_ids, show_type=True, show_content=True):
        self.multi_get_calls.append(list(object_ids))
        if any(object_id in self.failing_ids for object_id in object_ids):
            raise ConnectionError("rpc unavailable")
        return [self._response(object_id) for object_id in object_ids]

    async def get_chain_identifier(self):
        return "35834a8a"


def make_swap(
    pool: str,
    timestamp: int,
    a_in=0,
    b_in=0,
    a_out=0,
    b_out=0,
    fee_a=0,
    fee_b=0,
    tx_digest: Optional[str] = None,
    event_id: int = 0
) -> Dict[str, Any]:
    return {
        'tx_digest': tx_digest or f"tx-{pool}-{timestamp}",
        'event_id': event_id,
        'pool': pool,
        'amount_a_in': Decimal(a_in),
        'amount_b_in': Decimal(b_in),
        'amount_a_out': Decimal(a_out),
        'amount_b_out': Decimal(b_out),
        'fee_amount_a': Decimal(fee_a),
        'fee_amount_b': Decimal(fee_b),
        'timestamp': timestamp
    }


@pytest.fixture
def price_store():
    return FakePriceStore(
        decimals={SUI: 9, USDC: 6, CETUS: 9},
        constant_prices={SUI: "2.0", USDC: "1.0", CETUS: "0.1"}
    )


@pytest.fixture
def cached_store(price_store):
    return CachedPriceStore(
        price_store,
        BoundedLookupCache(50_000, name="prices"),
        BoundedLookupCache(10_000, name="decimals")
    )


@pytest.fixture
def valuator(cached_store):
    return Valuator(PriceResolver(cached_store), cached_store)


@pytest.fixture
def sui_client():
    return FakeSuiClient()


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def make_aggregation_engine(repository, sui_client, valuator):
    """Factory so tests can pick the page size"""

    def factory(page_size: int = 1000, repo: Optional[FakeRepository] = None):
        return AggregationEngine(
            repo or repository,
            PoolMetadataResolver(sui_client, min_interval=0),
            valuator,
            page_size=page_size,
            window_seconds=24 * 3600
        )

    return factory


@pytest.fixture
def liquidity_engine(repository, sui_client, valuator):
    return LiquiditySnapshotEngine(repository, sui_client, valuator, batch_size=50)
