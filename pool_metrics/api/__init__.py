from .sui_client import SuiClient, SuiRpcError, MAX_MULTI_GET_IDS
from .price_store import RedisPriceStore
from .cached_store import CachedPriceStore

__all__ = [
    "SuiClient",
    "SuiRpcError",
    "MAX_MULTI_GET_IDS",
    "RedisPriceStore",
    "CachedPriceStore"
]
