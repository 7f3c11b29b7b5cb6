from .pricing import PriceResolver, align_to_minute, minute_buckets
from .valuation import (
    Valuator,
    TokenQuote,
    QuoteStatus,
    SwapAmounts,
    SwapValuation,
    MissingDecimalsError
)
from .pool_metadata import PoolMetadataResolver
from .aggregation import AggregationEngine
from .liquidity import LiquiditySnapshotEngine
from .pruning import RetentionPruner

__all__ = [
    "PriceResolver",
    "align_to_minute",
    "minute_buckets",
    "Valuator",
    "TokenQuote",
    "QuoteStatus",
    "SwapAmounts",
    "SwapValuation",
    "MissingDecimalsError",
    "PoolMetadataResolver",
    "AggregationEngine",
    "LiquiditySnapshotEngine",
    "RetentionPruner"
]
