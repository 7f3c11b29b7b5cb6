"""USD valuation of swaps and pool positions"""

from decimal import Decimal
from enum import Enum
from typing import Any, NamedTuple, Optional, Tuple
import logging

from pool_metrics.utils.token_decimals import ZERO, to_decimal, usd_value
from .pricing import PriceResolver

logger = logging.getLogger(__name__)


class MissingDecimalsError(ValueError):
    """A token used in a valuation has no known decimal precision"""

    def __init__(self, token_type: str):
        self.token_type = token_type
        super().__init__(f"No decimals known for {token_type}")


class QuoteStatus(str, Enum):
    PRICED = "priced"
    MISSING_PRICE = "missing_price"
    MISSING_DECIMALS = "missing_decimals"


class TokenQuote(NamedTuple):
    token_type: str
    status: QuoteStatus
    price: Optional[Decimal] = None
    decimals: Optional[int] = None

    @property
    def priced(self) -> bool:
        return self.status == QuoteStatus.PRICED

    def value(self, amount: Any) -> Decimal:
        """USD value of a raw amount; zero when the token is not priced"""
        if not self.priced:
            return ZERO
        return usd_value(self.price, amount, self.decimals)


class SwapAmounts(NamedTuple):
    a_in: Decimal
    b_in: Decimal
    a_out: Decimal
    b_out: Decimal


class SwapValuation(NamedTuple):
    usd_value: Decimal
    usd_fee: Decimal
    # "input", "output" or "unpriced"
    basis: str


class Valuator:
    """Turns raw leg amounts into USD using resolved prices and decimals"""

    def __init__(self, price_resolver: PriceResolver, decimals_source):
        self.prices = price_resolver
        # Anything with `async get_decimals(token) -> Optional[int]`
        self.decimals = decimals_source

    async def quote(self, token_type: str, timestamp: int) -> TokenQuote:
        """Price and decimals for one token at a timestamp"""

        price = await self.prices.resolve_price(token_type, timestamp)
        decimals = await self.decimals.get_decimals(token_type)

        if decimals is None:
            return TokenQuote(token_type, QuoteStatus.MISSING_DECIMALS, price, None)
        if price is None:
            return TokenQuote(token_type, QuoteStatus.MISSING_PRICE, None, decimals)
        return TokenQuote(token_type, QuoteStatus.PRICED, price, decimals)

    @staticmethod
    def _require_decimals(quote: TokenQuote, *amounts: Decimal):
        if quote.status == QuoteStatus.MISSING_DECIMALS and any(a != 0 for a in amounts):
            raise MissingDecimalsError(quote.token_type)

    async def value_swap(
        self,
        pool_types: Tuple[str, str],
        amounts: SwapAmounts,
        fees: Tuple[Any, Any],
        timestamp: int
    ) -> SwapValuation:
        """USD volume and fee for a single swap.

        Volume is the input side when it values above zero, otherwise the
        output side. Raises MissingDecimalsError when a leg carrying a
        non-zero amount has no decimals.
        """

        type_a, type_b = pool_types
        amounts = SwapAmounts(*(to_decimal(a) for a in amounts))
        fee_a, fee_b = to_decimal(fees[0]), to_decimal(fees[1])

        quote_a = await self.quote(type_a, timestamp)
        quote_b = await self.quote(type_b, timestamp)

        self._require_decimals(quote_a, amounts.a_in, amounts.a_out, fee_a)
        self._require_decimals(quote_b, amounts.b_in, amounts.b_out, fee_b)

        in_value = quote_a.value(amounts.a_in) + quote_b.value(amounts.b_in)
        out_value = quote_a.value(amounts.a_out) + quote_b.value(amounts.b_out)
        usd_fee = quote_a.value(fee_a) + quote_b.value(fee_b)

        if in_value > 0:
            return SwapValuation(in_value, usd_fee, "input")
        if out_value > 0:
            return SwapValuation(out_value, usd_fee, "output")
        return SwapValuation(ZERO, usd_fee, "unpriced")

    async def value_position(
        self,
        pool_types: Tuple[str, str],
        amount_a: Any,
        amount_b: Any,
        timestamp: int
    ) -> Decimal:
        """USD value of both reserves of a pool (TVL)"""

        type_a, type_b = pool_types
        amount_a, amount_b = to_decimal(amount_a), to_decimal(amount_b)

        quote_a = await self.quote(type_a, timestamp)
        quote_b = await self.quote(type_b, timestamp)

        self._require_decimals(quote_a, amount_a)
        self._require_decimals(quote_b, amount_b)

        return quote_a.value(amount_a) + quote_b.value(amount_b)
