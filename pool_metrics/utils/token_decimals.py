"""Utilities for converting raw on-chain token amounts"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


def to_decimal(value: Any) -> Decimal:
    """Coerce a database/RPC amount into a Decimal, treating blanks as zero"""

    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


def parse_price(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a stored price string; unusable values count as no price"""

    if raw is None:
        return None
    try:
        price = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        logger.debug(f"Ignoring unparseable price value {raw!r}")
        return None
    if not price.is_finite():
        return None
    return price


def amount_to_ui(amount: Any, decimals: int) -> Decimal:
    """Convert raw amount to UI amount: amount / 10**decimals"""
    return to_decimal(amount).scaleb(-decimals)


def usd_value(price: Decimal, amount: Any, decimals: int) -> Decimal:
    """USD value of a raw amount at the given unit price"""

    amount = to_decimal(amount)
    if amount == 0:
        return ZERO
    return price * amount_to_ui(amount, decimals)
