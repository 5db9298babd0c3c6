"""Ladder walk over curve liquidity interleaved with resting orders.

Each step:
  1. Peek the next usable resting order (excluded owners are skipped).
  2. Let the curve fill up to the point where its price would cross that
     order's price, solved from the invariant, and never past the curve's
     open bid/ask bound.
  3. Fill from the order, advancing the cursor once it is fully consumed.

Running out of both sources before the requested amount is filled raises
InsufficientLiquidityError unless the caller asked for partial fills.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.pm_amm.domain.models import CurveReserves
from src.pm_amm.engine.curve import (
    BASE,
    AssetType,
    QuoteDenominated,
    apply_swap,
    calculate_price,
    calculate_quote_asset_amount_swapped,
    calculate_reserves_open_bid_ask,
    get_swap_direction,
    reserves_after_swap,
)
from src.pm_amm.engine.pricing import calculate_spread_reserves_for_direction
from src.pm_common.enums import PositionDirection, SwapDirection
from src.pm_common.errors import InsufficientLiquidityError
from src.pm_common.fixed_point import (
    AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO,
    BASE_PRECISION,
    PEG_PRECISION,
    PRICE_PRECISION,
    square_root,
    validate_non_negative,
)
from src.pm_market.domain.models import OraclePriceData, PerpMarket
from src.pm_matching.domain.models import FillResult, RestingOrder
from src.pm_matching.engine.cursor import OrderCursor

logger = logging.getLogger(__name__)


@dataclass
class _WalkState:
    reserves: CurveReserves
    curve_room: int  # base the curve may still supply before hitting its bound
    worst_price: int
    base_filled: int = 0
    quote_filled: int = 0
    curve_base_filled: int = 0

    def record_curve_fill(self, after: CurveReserves, base: int, quote: int) -> None:
        self.reserves = after
        self.curve_room -= base
        self.curve_base_filled += base
        self.base_filled += base
        self.quote_filled += quote
        self.worst_price = calculate_price(
            after.base_asset_reserve, after.quote_asset_reserve, after.peg_multiplier
        )

    def record_order_fill(self, base: int, quote: int, price: int) -> None:
        self.base_filled += base
        self.quote_filled += quote
        self.worst_price = price


def _base_fill_to_price(reserves: CurveReserves, price: int, taker_is_long: bool) -> int:
    """Base the curve supplies before its price reaches `price` (<= 0 if already past)."""
    if price <= 0:
        return 0
    new_base_reserve = square_root(
        reserves.invariant * PRICE_PRECISION * reserves.peg_multiplier // price // PEG_PRECISION
    )
    if taker_is_long:
        return reserves.base_asset_reserve - new_base_reserve
    return new_base_reserve - reserves.base_asset_reserve


def _quote_fill_to_price(reserves: CurveReserves, price: int, taker_is_long: bool) -> int:
    """Quote (QUOTE_PRECISION) the curve trades before its price reaches `price`."""
    if price <= 0:
        return 0
    new_quote_reserve = square_root(
        reserves.invariant * PEG_PRECISION * price // reserves.peg_multiplier // PRICE_PRECISION
    )
    if taker_is_long:
        reserve_delta = new_quote_reserve - reserves.quote_asset_reserve
    else:
        reserve_delta = reserves.quote_asset_reserve - new_quote_reserve
    if reserve_delta <= 0:
        return 0
    return reserve_delta * reserves.peg_multiplier // AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO


def _quote_room(state: _WalkState, taker_is_long: bool) -> int:
    """curve_room expressed in quote: what swapping the remaining base bound trades."""
    if state.curve_room <= 0:
        return 0
    base_direction = SwapDirection.REMOVE if taker_is_long else SwapDirection.ADD
    new_quote, _ = reserves_after_swap(state.reserves, BASE, state.curve_room, base_direction)
    reserve_delta = abs(new_quote - state.reserves.quote_asset_reserve)
    return reserve_delta * state.reserves.peg_multiplier // AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO


def _walk_base(
    state: _WalkState,
    cursor: OrderCursor,
    amount: int,
    direction: PositionDirection,
    oracle: OraclePriceData,
    excluded_owners: frozenset[str],
) -> None:
    taker_is_long = direction == PositionDirection.LONG
    swap_direction = get_swap_direction(BASE, direction)
    while state.base_filled < amount:
        order = cursor.skip_while_unusable(excluded_owners)
        remaining = amount - state.base_filled
        if order is not None:
            order_price = order.get_price(oracle)
            max_amm_fill = _base_fill_to_price(state.reserves, order_price, taker_is_long)
        else:
            max_amm_fill = remaining
        max_amm_fill = min(max_amm_fill, state.curve_room)

        if max_amm_fill > 0:
            base_filled = min(remaining, max_amm_fill)
            before = state.reserves
            after = apply_swap(before, BASE, base_filled, swap_direction)
            quote_filled = calculate_quote_asset_amount_swapped(
                abs(before.quote_asset_reserve - after.quote_asset_reserve),
                before.peg_multiplier,
                swap_direction,
            )
            state.record_curve_fill(after, base_filled, quote_filled)
            if state.base_filled == amount:
                break

        if order is None:
            break

        base_filled = min(order.remaining, amount - state.base_filled)
        quote_filled = base_filled * order_price // BASE_PRECISION
        state.record_order_fill(base_filled, quote_filled, order_price)
        if base_filled == order.remaining:
            cursor.advance()


def _walk_quote(
    state: _WalkState,
    cursor: OrderCursor,
    amount: int,
    asset_type: QuoteDenominated,
    direction: PositionDirection,
    oracle: OraclePriceData,
    excluded_owners: frozenset[str],
) -> None:
    taker_is_long = direction == PositionDirection.LONG
    swap_direction = get_swap_direction(asset_type, direction)
    while state.quote_filled < amount:
        order = cursor.skip_while_unusable(excluded_owners)
        remaining = amount - state.quote_filled
        if order is not None:
            order_price = order.get_price(oracle)
            max_amm_fill = _quote_fill_to_price(state.reserves, order_price, taker_is_long)
        else:
            max_amm_fill = remaining
        max_amm_fill = min(max_amm_fill, _quote_room(state, taker_is_long))

        if max_amm_fill > 0:
            quote_filled = min(remaining, max_amm_fill)
            before = state.reserves
            after = apply_swap(before, asset_type, quote_filled, swap_direction)
            base_filled = abs(after.base_asset_reserve - before.base_asset_reserve)
            state.record_curve_fill(after, base_filled, quote_filled)
            if state.quote_filled == amount:
                break

        if order is None:
            break

        order_quote = order.remaining * order_price // BASE_PRECISION
        quote_filled = min(order_quote, amount - state.quote_filled)
        base_filled = quote_filled * BASE_PRECISION // order_price
        state.record_order_fill(base_filled, quote_filled, order_price)
        if quote_filled == order_quote:
            cursor.advance()


def walk_liquidity(
    direction: PositionDirection,
    asset_type: AssetType,
    amount: int,
    market: PerpMarket,
    oracle: OraclePriceData,
    orders: Iterable[RestingOrder],
    now: int,
    excluded_owners: frozenset[str] = frozenset(),
    allow_partial: bool = False,
) -> FillResult:
    """Fill `amount` for a taker in `direction` against curve + resting orders.

    `orders` is the opposite side of the book, best price first: asks for a
    long taker, bids for a short taker. `amount` is in base or quote units
    per `asset_type`.
    """
    validate_non_negative("amount", amount)
    taker_is_long = direction == PositionDirection.LONG
    amm = market.amm

    reserves = calculate_spread_reserves_for_direction(amm, direction, oracle, now)
    open_bids, open_asks = calculate_reserves_open_bid_ask(reserves, amm)
    curve_capacity = abs(open_asks) if taker_is_long else open_bids

    cursor = OrderCursor(orders)
    best_price = calculate_price(
        reserves.base_asset_reserve, reserves.quote_asset_reserve, reserves.peg_multiplier
    )
    first_order = cursor.skip_while_unusable(excluded_owners)
    if first_order is not None:
        first_price = first_order.get_price(oracle)
        if curve_capacity == 0:
            best_price = first_price
        elif taker_is_long:
            best_price = min(first_price, best_price)
        else:
            best_price = max(first_price, best_price)

    state = _WalkState(reserves=reserves, curve_room=curve_capacity, worst_price=best_price)
    if isinstance(asset_type, QuoteDenominated):
        _walk_quote(state, cursor, amount, asset_type, direction, oracle, excluded_owners)
        filled = state.quote_filled
    else:
        _walk_base(state, cursor, amount, direction, oracle, excluded_owners)
        filled = state.base_filled

    fully_filled = filled == amount
    logger.debug(
        "Liquidity walk market=%d %s requested=%d filled=%d curve_base=%d orders=%d",
        market.market_index,
        direction.value,
        amount,
        filled,
        state.curve_base_filled,
        cursor.consumed,
    )
    if not fully_filled and not allow_partial:
        raise InsufficientLiquidityError(amount, filled)

    return FillResult(
        base_filled=state.base_filled,
        quote_filled=state.quote_filled,
        best_price=best_price,
        worst_price=state.worst_price,
        fully_filled=fully_filled,
        curve_base_filled=state.curve_base_filled,
        orders_consumed=cursor.consumed,
    )
