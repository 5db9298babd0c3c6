"""Reserve, bid and ask prices for a market snapshot."""

from src.pm_amm.domain.models import CurveReserves
from src.pm_amm.engine.curve import calculate_price
from src.pm_amm.engine.spread import calculate_spread_reserves
from src.pm_common.enums import PositionDirection
from src.pm_market.domain.models import AMM, OraclePriceData


def calculate_reserve_price(amm: AMM) -> int:
    """Raw curve price with no spread applied."""
    return calculate_price(amm.base_asset_reserve, amm.quote_asset_reserve, amm.peg_multiplier)


def calculate_bid_ask_price(amm: AMM, oracle: OraclePriceData, now: int) -> tuple[int, int]:
    bid_reserves, ask_reserves = calculate_spread_reserves(amm, oracle, now)
    bid_price = calculate_price(
        bid_reserves.base_asset_reserve, bid_reserves.quote_asset_reserve, bid_reserves.peg_multiplier
    )
    ask_price = calculate_price(
        ask_reserves.base_asset_reserve, ask_reserves.quote_asset_reserve, ask_reserves.peg_multiplier
    )
    return bid_price, ask_price


def calculate_bid_price(amm: AMM, oracle: OraclePriceData, now: int) -> int:
    return calculate_bid_ask_price(amm, oracle, now)[0]


def calculate_ask_price(amm: AMM, oracle: OraclePriceData, now: int) -> int:
    return calculate_bid_ask_price(amm, oracle, now)[1]


def calculate_spread_reserves_for_direction(
    amm: AMM, direction: PositionDirection, oracle: OraclePriceData, now: int
) -> CurveReserves:
    """Reserves a taker trades against: ask side for longs, bid side for shorts."""
    bid_reserves, ask_reserves = calculate_spread_reserves(amm, oracle, now)
    return ask_reserves if direction == PositionDirection.LONG else bid_reserves
