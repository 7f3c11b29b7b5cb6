from .models import (
    Base,
    CetusSwap,
    SwapDailySummary,
    LiquiditySnapshot,
    SUMMARY_METRICS
)
from .repository import SwapRepository, UpsertMode, build_summary_upsert

__all__ = [
    "Base",
    "CetusSwap",
    "SwapDailySummary",
    "LiquiditySnapshot",
    "SUMMARY_METRICS",
    "SwapRepository",
    "UpsertMode",
    "build_summary_upsert"
]
