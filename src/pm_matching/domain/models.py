from dataclasses import dataclass, field

from src.pm_common.enums import LiquiditySource, OrderSide
from src.pm_market.domain.models import OraclePriceData


@dataclass(frozen=True)
class RestingOrder:
    """Resting limit order as supplied by the order-source collaborator."""

    order_id: str
    owner: str  # used only for caller-side exclusion
    side: OrderSide
    base_asset_amount: int  # BASE_PRECISION
    base_asset_amount_filled: int = 0
    price: int = 0  # fixed limit price, PRICE_PRECISION
    oracle_price_offset: int | None = None  # floating: price = oracle + offset
    slot: int = 0  # placement slot, time priority

    @property
    def remaining(self) -> int:
        return self.base_asset_amount - self.base_asset_amount_filled

    def get_price(self, oracle: OraclePriceData) -> int:
        if self.oracle_price_offset is not None:
            return oracle.price + self.oracle_price_offset
        return self.price


@dataclass
class L2Level:
    """Aggregated depth at one price, with size broken down by source."""

    price: int
    size: int
    sources: dict[LiquiditySource, int] = field(default_factory=dict)


@dataclass(frozen=True)
class L2Snapshot:
    bids: list[L2Level]  # descending by price
    asks: list[L2Level]  # ascending by price
    slot: int


@dataclass(frozen=True)
class FillResult:
    """Outcome of walking curve + resting liquidity for one taker order."""

    base_filled: int  # BASE_PRECISION
    quote_filled: int  # QUOTE_PRECISION
    best_price: int
    worst_price: int
    fully_filled: bool
    curve_base_filled: int = 0
    orders_consumed: int = 0


@dataclass(frozen=True)
class EntryPriceEstimate:
    entry_price: int
    price_impact: int  # |entry - best| / best, PRICE_PRECISION
    best_price: int
    worst_price: int
    base_filled: int
    quote_filled: int
