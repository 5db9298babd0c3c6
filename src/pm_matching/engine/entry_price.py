import logging
from collections.abc import Iterable

from src.pm_amm.engine.curve import AssetType
from src.pm_amm.engine.pricing import calculate_reserve_price
from src.pm_common.enums import PositionDirection
from src.pm_common.fixed_point import BASE_PRECISION, PRICE_PRECISION, div_trunc
from src.pm_market.domain.models import OraclePriceData, PerpMarket
from src.pm_matching.domain.models import EntryPriceEstimate, RestingOrder
from src.pm_matching.engine.merge import walk_liquidity

logger = logging.getLogger(__name__)


def calculate_estimated_entry_price(
    asset_type: AssetType,
    amount: int,
    direction: PositionDirection,
    market: PerpMarket,
    oracle: OraclePriceData,
    orders: Iterable[RestingOrder],
    now: int,
    excluded_owners: frozenset[str] = frozenset(),
    allow_partial: bool = False,
) -> EntryPriceEstimate:
    """Average fill price of a taker order across curve and resting liquidity.

    entry_price  = quote_filled * BASE_PRECISION / base_filled
    price_impact = |entry_price - best_price| / best_price   (PRICE_PRECISION)

    A zero amount is a no-op priced at the unadjusted reserve price.
    """
    if amount == 0:
        reserve_price = calculate_reserve_price(market.amm)
        return EntryPriceEstimate(
            entry_price=reserve_price,
            price_impact=0,
            best_price=reserve_price,
            worst_price=reserve_price,
            base_filled=0,
            quote_filled=0,
        )

    fill = walk_liquidity(
        direction,
        asset_type,
        amount,
        market,
        oracle,
        orders,
        now,
        excluded_owners=excluded_owners,
        allow_partial=allow_partial,
    )

    if fill.base_filled == 0:
        entry_price = fill.best_price
    else:
        entry_price = fill.quote_filled * BASE_PRECISION // fill.base_filled

    if fill.best_price == 0:
        price_impact = 0
    else:
        price_impact = abs(div_trunc((entry_price - fill.best_price) * PRICE_PRECISION, fill.best_price))

    logger.debug(
        "Entry estimate market=%d %s entry=%d best=%d worst=%d impact=%d",
        market.market_index,
        direction.value,
        entry_price,
        fill.best_price,
        fill.worst_price,
        price_impact,
    )
    return EntryPriceEstimate(
        entry_price=entry_price,
        price_impact=price_impact,
        best_price=fill.best_price,
        worst_price=fill.worst_price,
        base_filled=fill.base_filled,
        quote_filled=fill.quote_filled,
    )
