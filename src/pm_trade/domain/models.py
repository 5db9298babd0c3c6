from dataclasses import dataclass

from src.pm_common.enums import PositionDirection


@dataclass(frozen=True)
class AcquiredAmounts:
    """Signed reserve deltas (pre - post) and the quote paid or received."""

    base_asset_amount: int  # AMM_RESERVE_PRECISION, > 0 when the taker receives base
    quote_asset_reserve_amount: int  # AMM_RESERVE_PRECISION
    quote_asset_amount: int  # QUOTE_PRECISION, unsigned


@dataclass(frozen=True)
class TradeSlippage:
    pct_avg_slippage: int  # entry vs start, PRICE_PRECISION
    pct_max_slippage: int  # post-trade vs start, PRICE_PRECISION
    entry_price: int
    new_price: int


@dataclass(frozen=True)
class TargetPriceTrade:
    direction: PositionDirection
    trade_size: int  # QUOTE_PRECISION, or base units when base output requested
    entry_price: int
    target_price: int  # after pct scaling
    resulting_price: int  # curve price the solved trade lands on
