"""Tests for nearest-minute price resolution"""

from decimal import Decimal

import pytest

from pool_metrics.engine import PriceResolver, align_to_minute, minute_buckets
from tests.conftest import FakePriceStore, SUI

T0 = 1_700_000_040  # minute aligned


class TestMinuteBuckets:

    def test_alignment(self):
        assert align_to_minute(T0) == T0
        assert align_to_minute(T0 + 59) == T0
        assert minute_buckets(T0 + 17) == (T0, T0 + 60)

    def test_on_boundary_first_bucket_is_timestamp(self):
        t0, t1 = minute_buckets(T0)
        assert t0 == T0
        assert t1 == T0 + 60


class TestPriceResolver:

    @pytest.fixture
    def store(self):
        return FakePriceStore(prices={(SUI, T0): "1.00", (SUI, T0 + 60): "3.00"})

    @pytest.mark.asyncio
    async def test_picks_nearer_bucket(self, store):
        resolver = PriceResolver(store)

        assert await resolver.resolve_price(SUI, T0 + 40) == Decimal("3.00")
        assert await resolver.resolve_price(SUI, T0 + 10) == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_tie_goes_to_earlier_bucket(self, store):
        resolver = PriceResolver(store)
        assert await resolver.resolve_price(SUI, T0 + 30) == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_queries_both_buckets(self, store):
        resolver = PriceResolver(store)
        await resolver.resolve_price(SUI, T0 + 5)

        assert sorted(store.price_calls) == [(SUI, T0), (SUI, T0 + 60)]

    @pytest.mark.asyncio
    async def test_falls_back_to_available_bucket(self):
        only_later = FakePriceStore(prices={(SUI, T0 + 60): "3.00"})
        only_earlier = FakePriceStore(prices={(SUI, T0): "1.00"})

        assert await PriceResolver(only_later).resolve_price(SUI, T0 + 1) == Decimal("3.00")
        assert await PriceResolver(only_earlier).resolve_price(SUI, T0 + 59) == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_no_samples(self):
        assert await PriceResolver(FakePriceStore()).resolve_price(SUI, T0 + 5) is None

    @pytest.mark.asyncio
    async def test_failed_bucket_treated_as_absent(self, store):
        store.failing_buckets.add((SUI, T0))
        resolver = PriceResolver(store)

        # T0 is nearer but its lookup fails
        assert await resolver.resolve_price(SUI, T0 + 10) == Decimal("3.00")

    @pytest.mark.asyncio
    async def test_unparseable_price_ignored(self):
        store = FakePriceStore(prices={(SUI, T0): "garbage", (SUI, T0 + 60): "3.00"})
        assert await PriceResolver(store).resolve_price(SUI, T0 + 1) == Decimal("3.00")
