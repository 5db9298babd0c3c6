"""L2 depth: vAMM levels, resting-order levels, and the merged snapshot.

The vAMM side is discretised into `num_orders` levels. The first levels
swap the configured top-of-book quote amounts, giving fine granularity near
the best price; the remaining open liquidity is split evenly in base across
the rest. Each level's size is capped to what the curve can still absorb
(bids) or supply (asks) within its reserve bounds.
"""

import heapq
import logging
from collections.abc import Iterable, Iterator, Sequence
from itertools import groupby

from src.pm_amm.domain.models import CurveReserves
from src.pm_amm.engine.curve import (
    BASE,
    QUOTE,
    apply_swap,
    calculate_quote_asset_amount_swapped,
    calculate_reserves_open_bid_ask,
)
from src.pm_amm.engine.spread import calculate_spread_reserves
from src.pm_common.enums import LiquiditySource, OrderSide, SwapDirection
from src.pm_common.errors import InvalidOrderCountError
from src.pm_common.fixed_point import BASE_PRECISION
from src.pm_market.domain.models import OraclePriceData, PerpMarket
from src.pm_matching.domain.models import L2Level, L2Snapshot, RestingOrder
from src.pm_matching.engine.order_book import OrderBook

logger = logging.getLogger(__name__)

DEFAULT_VAMM_NUM_ORDERS = 10


class VammL2Generator:
    """Lazily produces vAMM bid and ask levels from one market snapshot.

    Each call to bids() / asks() starts a fresh walk from the spread-adjusted
    reserves, so the generator can be iterated more than once.
    """

    def __init__(
        self,
        market: PerpMarket,
        oracle: OraclePriceData,
        now: int,
        num_orders: int = DEFAULT_VAMM_NUM_ORDERS,
        top_of_book_quote_amounts: Sequence[int] = (),
    ) -> None:
        if len(top_of_book_quote_amounts) >= num_orders:
            raise InvalidOrderCountError(num_orders, len(top_of_book_quote_amounts))
        self.market = market
        self.num_orders = num_orders
        self.top_of_book_quote_amounts = tuple(top_of_book_quote_amounts)
        self.num_base_orders = num_orders - len(self.top_of_book_quote_amounts)

        amm = market.amm
        self.bid_reserves, self.ask_reserves = calculate_spread_reserves(amm, oracle, now)
        self.open_bids, _ = calculate_reserves_open_bid_ask(self.bid_reserves, amm)
        _, self.open_asks = calculate_reserves_open_bid_ask(self.ask_reserves, amm)

    def bids(self) -> Iterator[L2Level]:
        # taker sells: base flows into the curve, quote out
        return self._levels(
            self.bid_reserves,
            self.open_bids,
            quote_direction=SwapDirection.REMOVE,
            base_direction=SwapDirection.ADD,
        )

    def asks(self) -> Iterator[L2Level]:
        # taker buys: quote flows into the curve, base out
        return self._levels(
            self.ask_reserves,
            abs(self.open_asks),
            quote_direction=SwapDirection.ADD,
            base_direction=SwapDirection.REMOVE,
        )

    def _levels(
        self,
        reserves: CurveReserves,
        open_liquidity: int,
        quote_direction: SwapDirection,
        base_direction: SwapDirection,
    ) -> Iterator[L2Level]:
        num_levels = 0
        top_of_book_size = 0
        level_size = open_liquidity // self.num_base_orders

        while num_levels < self.num_orders and level_size > 0:
            if num_levels < len(self.top_of_book_quote_amounts):
                quote_swapped = self.top_of_book_quote_amounts[num_levels]
                remaining = open_liquidity - top_of_book_size
                reserve_delta = QUOTE.to_reserve_amount(
                    quote_swapped, reserves.peg_multiplier, quote_direction
                )
                fits = (
                    quote_direction == SwapDirection.ADD
                    or reserve_delta < reserves.quote_asset_reserve
                )
                if fits:
                    after = apply_swap(reserves, QUOTE, quote_swapped, quote_direction)
                    base_swapped = abs(reserves.base_asset_reserve - after.base_asset_reserve)

                # checkpoint deeper than the curve can go: take what is left
                if not fits or remaining < base_swapped:
                    base_swapped = remaining
                    after = apply_swap(reserves, BASE, base_swapped, base_direction)
                    quote_swapped = calculate_quote_asset_amount_swapped(
                        abs(reserves.quote_asset_reserve - after.quote_asset_reserve),
                        reserves.peg_multiplier,
                        base_direction,
                    )

                top_of_book_size += base_swapped
                level_size = (open_liquidity - top_of_book_size) // self.num_base_orders
            else:
                base_swapped = level_size
                after = apply_swap(reserves, BASE, base_swapped, base_direction)
                quote_swapped = calculate_quote_asset_amount_swapped(
                    abs(reserves.quote_asset_reserve - after.quote_asset_reserve),
                    reserves.peg_multiplier,
                    base_direction,
                )

            if base_swapped == 0:
                return

            price = quote_swapped * BASE_PRECISION // base_swapped
            reserves = after
            num_levels += 1
            yield L2Level(price=price, size=base_swapped, sources={LiquiditySource.VAMM: base_swapped})


def resting_order_l2_levels(
    orders: Iterable[RestingOrder], oracle: OraclePriceData
) -> Iterator[L2Level]:
    """Aggregate price-sorted resting orders into one level per distinct price."""
    for price, group in groupby(orders, key=lambda o: o.get_price(oracle)):
        size = sum(o.remaining for o in group)
        if size > 0:
            yield L2Level(price=price, size=size, sources={LiquiditySource.DLOB: size})


def merge_l2_levels(side: OrderSide, *level_streams: Iterable[L2Level]) -> Iterator[L2Level]:
    """Merge already-sorted level streams, combining levels at the same price."""
    descending = side == OrderSide.BID
    merged = heapq.merge(*level_streams, key=lambda level: level.price, reverse=descending)
    for price, group in groupby(merged, key=lambda level: level.price):
        combined = L2Level(price=price, size=0, sources={})
        for level in group:
            combined.size += level.size
            for source, size in level.sources.items():
                combined.sources[source] = combined.sources.get(source, 0) + size
        yield combined


def create_l2_levels(levels: Iterable[L2Level], depth: int) -> list[L2Level]:
    """Take the best `depth` levels from a sorted stream."""
    result = []
    for level in levels:
        if len(result) >= depth:
            break
        result.append(level)
    return result


def get_l2_snapshot(
    market: PerpMarket,
    oracle: OraclePriceData,
    order_book: OrderBook,
    now: int,
    depth: int,
    num_vamm_orders: int = DEFAULT_VAMM_NUM_ORDERS,
    top_of_book_quote_amounts: Sequence[int] = (),
    include_vamm: bool = True,
) -> L2Snapshot:
    bid_streams: list[Iterable[L2Level]] = [
        resting_order_l2_levels(order_book.limit_bids(oracle), oracle)
    ]
    ask_streams: list[Iterable[L2Level]] = [
        resting_order_l2_levels(order_book.limit_asks(oracle), oracle)
    ]
    if include_vamm:
        generator = VammL2Generator(
            market,
            oracle,
            now,
            num_orders=num_vamm_orders,
            top_of_book_quote_amounts=top_of_book_quote_amounts,
        )
        bid_streams.append(generator.bids())
        ask_streams.append(generator.asks())

    bids = create_l2_levels(merge_l2_levels(OrderSide.BID, *bid_streams), depth)
    asks = create_l2_levels(merge_l2_levels(OrderSide.ASK, *ask_streams), depth)
    logger.debug(
        "L2 snapshot market=%d depth=%d bids=%d asks=%d vamm=%s",
        market.market_index,
        depth,
        len(bids),
        len(asks),
        include_vamm,
    )
    return L2Snapshot(bids=bids, asks=asks, slot=oracle.slot)
