from .cetus_pool import CetusPoolParser, parse_pool_types, POOL_TYPE_PATTERN

__all__ = [
    "CetusPoolParser",
    "parse_pool_types",
    "POOL_TYPE_PATTERN"
]
