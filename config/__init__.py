from .settings import Settings, settings


def get_database_url() -> str:
    """Database URL in the form asyncpg expects"""
    url = settings.DATABASE_URL
    # Hosted providers hand out the SQLAlchemy-style scheme
    if url.startswith("postgresql+asyncpg://"):
        url = "postgresql://" + url[len("postgresql+asyncpg://"):]
    return url


def get_redis_url() -> str:
    return settings.REDIS_URL


def get_sui_rpc_url() -> str:
    return settings.SUI_RPC_URL


__all__ = [
    "Settings",
    "settings",
    "get_database_url",
    "get_redis_url",
    "get_sui_rpc_url"
]
