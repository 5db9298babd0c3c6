"""Trade solver: the trade that moves the curve price to a target.

Closed form from the invariant (PRICE_PRECISION == PEG_PRECISION):

    price = quote * peg / base,  quote = K / base
    =>  base_after = sqrt(K * peg / target)

The square root is biased by one unit away from the target so integer
truncation never overshoots it.
"""

import logging

from src.pm_amm.domain.invariants import verify_target_price_monotonic
from src.pm_amm.engine.curve import calculate_price
from src.pm_amm.engine.pricing import calculate_bid_ask_price, calculate_reserve_price
from src.pm_common.enums import PositionDirection
from src.pm_common.errors import (
    InvalidPercentageError,
    InvalidTargetPriceError,
    NonPositiveReserveError,
)
from src.pm_common.fixed_point import (
    AMM_TO_QUOTE_PRECISION_RATIO,
    PEG_PRECISION,
    PRICE_PRECISION,
    div_trunc,
    square_root,
)
from src.pm_market.domain.models import OraclePriceData, PerpMarket
from src.pm_trade.domain.models import TargetPriceTrade
from src.pm_trade.engine.slippage import trading_reserves

logger = logging.getLogger(__name__)

MAX_PCT = 1000  # pct units: [0, 1000] => [0, 1]
TARGET_PRICE_TOLERANCE = 100_000


def calculate_target_price_trade(
    market: PerpMarket,
    target_price: int,
    oracle: OraclePriceData,
    now: int,
    pct: int = MAX_PCT,
    output_base: bool = False,
    use_spread: bool = True,
) -> TargetPriceTrade:
    """Direction and size of the trade that closes `pct` of the gap to target_price.

    A target inside the current bid/ask needs no trade: size 0, priced at target.
    """
    amm = market.amm
    if amm.base_asset_reserve <= 0:
        raise NonPositiveReserveError("base_asset_reserve", amm.base_asset_reserve)
    if target_price <= 0:
        raise InvalidTargetPriceError(target_price)
    if not 0 < pct <= MAX_PCT:
        raise InvalidPercentageError(pct, MAX_PCT)

    reserve_price_before = calculate_reserve_price(amm)
    bid_price_before, ask_price_before = calculate_bid_ask_price(amm, oracle, now)

    if target_price > reserve_price_before:
        price_gap_scaled = (target_price - reserve_price_before) * pct // MAX_PCT
        target_price = reserve_price_before + price_gap_scaled
        direction = PositionDirection.LONG
    else:
        price_gap_scaled = (reserve_price_before - target_price) * pct // MAX_PCT
        target_price = reserve_price_before - price_gap_scaled
        direction = PositionDirection.SHORT

    reserves = trading_reserves(market, direction, oracle, now, use_spread)
    peg = reserves.peg_multiplier
    k = reserves.invariant * PRICE_PRECISION

    if use_spread and bid_price_before < target_price < ask_price_before:
        direction = (
            PositionDirection.SHORT
            if reserve_price_before > target_price
            else PositionDirection.LONG
        )
        return TargetPriceTrade(direction, 0, target_price, target_price, target_price)

    if reserve_price_before > target_price:
        # overestimate base_after
        base_after = square_root(k // target_price * peg // PEG_PRECISION - 1) - 1
        quote_after = k // PRICE_PRECISION // base_after
        price_after = calculate_price(base_after, quote_after, peg)
        direction = PositionDirection.SHORT
        trade_size = div_trunc(
            div_trunc((reserves.quote_asset_reserve - quote_after) * peg, PEG_PRECISION),
            AMM_TO_QUOTE_PRECISION_RATIO,
        )
        base_size = base_after - reserves.base_asset_reserve
        tp1, tp2 = price_after, target_price
        original_diff = reserve_price_before - target_price
    elif reserve_price_before < target_price:
        # underestimate base_after
        base_after = square_root(k // target_price * peg // PEG_PRECISION + 1) + 1
        quote_after = k // PRICE_PRECISION // base_after
        price_after = calculate_price(base_after, quote_after, peg)
        direction = PositionDirection.LONG
        trade_size = div_trunc(
            div_trunc((quote_after - reserves.quote_asset_reserve) * peg, PEG_PRECISION),
            AMM_TO_QUOTE_PRECISION_RATIO,
        )
        base_size = reserves.base_asset_reserve - base_after
        tp1, tp2 = target_price, price_after
        original_diff = target_price - reserve_price_before
    else:
        return TargetPriceTrade(PositionDirection.LONG, 0, target_price, target_price, target_price)

    if base_size == 0:
        entry_price = target_price
    else:
        entry_price = (
            abs(trade_size) * AMM_TO_QUOTE_PRECISION_RATIO * PRICE_PRECISION // abs(base_size)
        )

    verify_target_price_monotonic(tp1, tp2, original_diff, TARGET_PRICE_TOLERANCE)
    logger.debug(
        "Target trade: %s size=%d base=%d price %d -> %d (target %d)",
        direction.value,
        trade_size,
        base_size,
        reserve_price_before,
        price_after,
        target_price,
    )

    size = base_size if output_base else trade_size
    return TargetPriceTrade(direction, size, entry_price, target_price, price_after)
