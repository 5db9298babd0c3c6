"""Price impact of a single trade against the (spread-adjusted) curve."""

from src.pm_amm.domain.models import CurveReserves
from src.pm_amm.engine.curve import (
    QUOTE,
    AssetType,
    calculate_price,
    calculate_quote_asset_amount_swapped,
    get_swap_direction,
    reserves_after_swap,
)
from src.pm_amm.engine.pricing import (
    calculate_bid_ask_price,
    calculate_reserve_price,
    calculate_spread_reserves_for_direction,
)
from src.pm_common.enums import PositionDirection
from src.pm_common.errors import InvariantViolationError
from src.pm_common.fixed_point import (
    AMM_TO_QUOTE_PRECISION_RATIO,
    PRICE_PRECISION,
    div_trunc,
)
from src.pm_market.domain.models import OraclePriceData, PerpMarket
from src.pm_trade.domain.models import AcquiredAmounts, TradeSlippage


def trading_reserves(
    market: PerpMarket,
    direction: PositionDirection,
    oracle: OraclePriceData,
    now: int,
    use_spread: bool,
) -> CurveReserves:
    """Reserves a taker in `direction` trades against."""
    if use_spread and market.amm.base_spread > 0:
        return calculate_spread_reserves_for_direction(market.amm, direction, oracle, now)
    return CurveReserves.from_amm(market.amm)


def calculate_trade_acquired_amounts(
    direction: PositionDirection,
    amount: int,
    market: PerpMarket,
    oracle: OraclePriceData,
    now: int,
    asset_type: AssetType = QUOTE,
    use_spread: bool = True,
) -> AcquiredAmounts:
    if amount == 0:
        return AcquiredAmounts(0, 0, 0)

    swap_direction = get_swap_direction(asset_type, direction)
    reserves = trading_reserves(market, direction, oracle, now, use_spread)

    new_quote, new_base = reserves_after_swap(reserves, asset_type, amount, swap_direction)
    acquired_base = reserves.base_asset_reserve - new_base
    acquired_quote = reserves.quote_asset_reserve - new_quote
    quote_asset_amount = calculate_quote_asset_amount_swapped(
        abs(acquired_quote), reserves.peg_multiplier, swap_direction
    )
    return AcquiredAmounts(acquired_base, acquired_quote, quote_asset_amount)


def calculate_trade_slippage(
    direction: PositionDirection,
    amount: int,
    market: PerpMarket,
    oracle: OraclePriceData,
    now: int,
    asset_type: AssetType = QUOTE,
    use_spread: bool = True,
) -> TradeSlippage:
    """Average and worst-case slippage of one curve trade.

    A zero amount is a no-op: zero slippage, both prices at the raw reserve price.
    """
    if amount == 0:
        reserve_price = calculate_reserve_price(market.amm)
        return TradeSlippage(0, 0, reserve_price, reserve_price)

    if use_spread and market.amm.base_spread > 0:
        bid, ask = calculate_bid_ask_price(market.amm, oracle, now)
        old_price = ask if direction == PositionDirection.LONG else bid
    else:
        old_price = calculate_reserve_price(market.amm)

    acquired = calculate_trade_acquired_amounts(
        direction, amount, market, oracle, now, asset_type, use_spread
    )
    if acquired.base_asset_amount == 0:
        # too small to move a single base unit
        return TradeSlippage(0, 0, old_price, old_price)

    entry_price = (
        acquired.quote_asset_amount
        * AMM_TO_QUOTE_PRECISION_RATIO
        * PRICE_PRECISION
        // abs(acquired.base_asset_amount)
    )

    reserves = trading_reserves(market, direction, oracle, now, use_spread)
    new_price = calculate_price(
        reserves.base_asset_reserve - acquired.base_asset_amount,
        reserves.quote_asset_reserve - acquired.quote_asset_reserve_amount,
        reserves.peg_multiplier,
    )

    if direction == PositionDirection.SHORT and new_price > old_price:
        raise InvariantViolationError(f"Short moved price up: {old_price} -> {new_price}")
    if direction == PositionDirection.LONG and new_price < old_price:
        raise InvariantViolationError(f"Long moved price down: {old_price} -> {new_price}")

    pct_max_slippage = abs(div_trunc((new_price - old_price) * PRICE_PRECISION, old_price))
    pct_avg_slippage = abs(div_trunc((entry_price - old_price) * PRICE_PRECISION, old_price))
    return TradeSlippage(pct_avg_slippage, pct_max_slippage, entry_price, new_price)
