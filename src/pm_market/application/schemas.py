"""Pydantic schemas for simulation results handed to display code.

Every fixed-point integer is returned raw alongside a *_display float
produced by convert_to_number with the matching precision:
  prices, funding rates: PRICE_PRECISION
  base sizes:            BASE_PRECISION
  quote amounts:         QUOTE_PRECISION
"""

from pydantic import BaseModel

from src.pm_common.fixed_point import (
    BASE_PRECISION,
    PRICE_PRECISION,
    QUOTE_PRECISION,
    convert_to_number,
)
from src.pm_funding.domain.models import FundingEstimate
from src.pm_matching.domain.models import EntryPriceEstimate, L2Level, L2Snapshot
from src.pm_trade.domain.models import TargetPriceTrade

# ---------------------------------------------------------------------------
# L2 depth
# ---------------------------------------------------------------------------


class L2LevelOut(BaseModel):
    price: int
    price_display: float
    size: int
    size_display: float
    sources: dict[str, int]

    @classmethod
    def from_domain(cls, level: L2Level) -> "L2LevelOut":
        return cls(
            price=level.price,
            price_display=convert_to_number(level.price, PRICE_PRECISION),
            size=level.size,
            size_display=convert_to_number(level.size, BASE_PRECISION),
            sources={source.value: size for source, size in level.sources.items()},
        )


class L2SnapshotResponse(BaseModel):
    market_index: int
    bids: list[L2LevelOut]
    asks: list[L2LevelOut]
    slot: int

    @classmethod
    def from_domain(cls, market_index: int, snapshot: L2Snapshot) -> "L2SnapshotResponse":
        return cls(
            market_index=market_index,
            bids=[L2LevelOut.from_domain(lv) for lv in snapshot.bids],
            asks=[L2LevelOut.from_domain(lv) for lv in snapshot.asks],
            slot=snapshot.slot,
        )


# ---------------------------------------------------------------------------
# Trade preview
# ---------------------------------------------------------------------------


class EntryPriceResponse(BaseModel):
    market_index: int
    direction: str
    entry_price: int
    entry_price_display: float
    price_impact: int
    price_impact_display: float  # fraction, 0.01 == 1%
    best_price: int
    worst_price: int
    base_filled: int
    base_filled_display: float
    quote_filled: int
    quote_filled_display: float
    fee: int
    fee_display: float
    fully_filled: bool

    @classmethod
    def from_domain(
        cls,
        market_index: int,
        direction: str,
        estimate: EntryPriceEstimate,
        fee: int,
        fully_filled: bool,
    ) -> "EntryPriceResponse":
        return cls(
            market_index=market_index,
            direction=direction,
            entry_price=estimate.entry_price,
            entry_price_display=convert_to_number(estimate.entry_price, PRICE_PRECISION),
            price_impact=estimate.price_impact,
            price_impact_display=convert_to_number(estimate.price_impact, PRICE_PRECISION),
            best_price=estimate.best_price,
            worst_price=estimate.worst_price,
            base_filled=estimate.base_filled,
            base_filled_display=convert_to_number(estimate.base_filled, BASE_PRECISION),
            quote_filled=estimate.quote_filled,
            quote_filled_display=convert_to_number(estimate.quote_filled, QUOTE_PRECISION),
            fee=fee,
            fee_display=convert_to_number(fee, QUOTE_PRECISION),
            fully_filled=fully_filled,
        )


class TargetPriceTradeResponse(BaseModel):
    market_index: int
    direction: str
    trade_size: int
    entry_price: int
    entry_price_display: float
    target_price: int
    target_price_display: float
    resulting_price: int
    resulting_price_display: float

    @classmethod
    def from_domain(cls, market_index: int, trade: TargetPriceTrade) -> "TargetPriceTradeResponse":
        return cls(
            market_index=market_index,
            direction=trade.direction.value,
            trade_size=trade.trade_size,
            entry_price=trade.entry_price,
            entry_price_display=convert_to_number(trade.entry_price, PRICE_PRECISION),
            target_price=trade.target_price,
            target_price_display=convert_to_number(trade.target_price, PRICE_PRECISION),
            resulting_price=trade.resulting_price,
            resulting_price_display=convert_to_number(trade.resulting_price, PRICE_PRECISION),
        )


# ---------------------------------------------------------------------------
# Funding
# ---------------------------------------------------------------------------


class FundingRateResponse(BaseModel):
    market_index: int
    method: str
    estimated_rate: int
    estimated_rate_display: float  # percent of oracle TWAP per period
    mark_twap: int
    mark_twap_display: float
    oracle_twap: int
    oracle_twap_display: float
    long_rate: int
    short_rate: int

    @classmethod
    def from_domain(
        cls,
        market_index: int,
        method: str,
        estimated_rate: int,
        estimate: FundingEstimate,
        long_rate: int,
        short_rate: int,
    ) -> "FundingRateResponse":
        return cls(
            market_index=market_index,
            method=method,
            estimated_rate=estimated_rate,
            estimated_rate_display=convert_to_number(estimated_rate, PRICE_PRECISION),
            mark_twap=estimate.mark_twap,
            mark_twap_display=convert_to_number(estimate.mark_twap, PRICE_PRECISION),
            oracle_twap=estimate.oracle_twap,
            oracle_twap_display=convert_to_number(estimate.oracle_twap, PRICE_PRECISION),
            long_rate=long_rate,
            short_rate=short_rate,
        )
