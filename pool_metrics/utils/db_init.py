"""Database schema initialization"""

import asyncio
from typing import List
import logging

import asyncpg
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable

from config import get_database_url
from pool_metrics.data.models import Base

logger = logging.getLogger(__name__)


def schema_statements() -> List[str]:
    """CREATE TABLE/INDEX IF NOT EXISTS statements for every model"""

    dialect = postgresql.dialect()
    statements = []
    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)))
        for index in sorted(table.indexes, key=lambda ix: ix.name):
            statements.append(str(CreateIndex(index, if_not_exists=True).compile(dialect=dialect)))
    return statements


async def ensure_schema(db_pool: asyncpg.Pool):
    """Ensure the swap, summary and snapshot tables exist"""

    async with db_pool.acquire() as conn:
        async with conn.transaction():
            for statement in schema_statements():
                await conn.execute(statement)

    logger.info("Database schema verified")


async def _main():
    pool = await asyncpg.create_pool(get_database_url(), min_size=1, max_size=1)
    try:
        await ensure_schema(pool)
    finally:
        await pool.close()


if __name__ == "__main__":
    asyncio.run(_main())
