from sqlalchemy import (
    Column, String, Numeric, Integer, BigInteger, Date, Index, PrimaryKeyConstraint
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CetusSwap(Base):
    """Swap events written by the checkpoint indexer"""
    __tablename__ = 'cetus_swap'

    tx_digest = Column(String, nullable=False)
    event_id = Column(BigInteger, nullable=False)
    pool = Column(String, nullable=False)
    amount_a_in = Column(Numeric, nullable=False, default=0)
    amount_a_out = Column(Numeric, nullable=False, default=0)
    amount_b_in = Column(Numeric, nullable=False, default=0)
    amount_b_out = Column(Numeric, nullable=False, default=0)
    fee_amount_a = Column(Numeric, nullable=False, default=0)
    fee_amount_b = Column(Numeric, nullable=False, default=0)
    timestamp = Column(BigInteger, nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint('tx_digest', 'event_id'),
        Index('idx_cetus_swap_timestamp', 'timestamp'),
        Index('idx_cetus_swap_pool_timestamp', 'pool', 'timestamp'),
    )


class SwapDailySummary(Base):
    __tablename__ = 'cetus_swap_daily_summary'

    pool = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    total_a_in = Column(Numeric, nullable=False, default=0)
    total_a_out = Column(Numeric, nullable=False, default=0)
    total_b_in = Column(Numeric, nullable=False, default=0)
    total_b_out = Column(Numeric, nullable=False, default=0)
    total_usd = Column(Numeric, nullable=False, default=0)
    total_fee_usd = Column(Numeric, nullable=False, default=0)
    total_fee_a = Column(Numeric, nullable=False, default=0)
    total_fee_b = Column(Numeric, nullable=False, default=0)
    swap_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        PrimaryKeyConstraint('pool', 'date'),
        Index('idx_daily_summary_date', 'date'),
    )


class LiquiditySnapshot(Base):
    """Append-only TVL snapshots, one row per pool per run"""
    __tablename__ = 'cetus_liquidity_snapshot'

    id = Column(BigInteger, primary_key=True, autoincrement=True)
    pool = Column(String, nullable=False)
    amount_a = Column(Numeric, nullable=False)
    amount_b = Column(Numeric, nullable=False)
    type_a = Column(String, nullable=False)
    type_b = Column(String, nullable=False)
    timestamp = Column(BigInteger, nullable=False)
    tvl = Column(Numeric, nullable=False)

    __table_args__ = (
        Index('idx_liquidity_snapshot_pool_time', 'pool', 'timestamp'),
        Index('idx_liquidity_snapshot_timestamp', 'timestamp'),
    )


# Metric columns of the daily summary, in insert order after (pool, date)
SUMMARY_METRICS = (
    'total_a_in',
    'total_a_out',
    'total_b_in',
    'total_b_out',
    'total_usd',
    'total_fee_usd',
    'total_fee_a',
    'total_fee_b',
    'swap_count',
)
