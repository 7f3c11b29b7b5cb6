from .lookup_cache import BoundedLookupCache
from .token_decimals import to_decimal, parse_price, amount_to_ui, usd_value

__all__ = [
    "BoundedLookupCache",
    "to_decimal",
    "parse_price",
    "amount_to_ui",
    "usd_value"
]
