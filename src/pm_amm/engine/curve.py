"""Constant-product curve engine.

Every reserve move goes through swap(), which keeps
base_reserve * quote_reserve == sqrt_k ** 2 up to floor-division residue.

Amounts are tagged with the asset they are denominated in:

    BaseDenominated   enters the curve unchanged
    QuoteDenominated  rescaled by reserve_scale / peg first; rounds up on
                      REMOVE when inexact so a short never receives extra
                      quote, while ADD keeps the floor
"""

from dataclasses import dataclass

from src.pm_amm.domain.invariants import verify_swap_invariant
from src.pm_amm.domain.models import CurveReserves
from src.pm_common.enums import PositionDirection, SwapDirection
from src.pm_common.errors import NonPositiveReserveError
from src.pm_common.fixed_point import (
    AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO,
    PRICE_DIV_PEG,
    validate_non_negative,
)
from src.pm_market.domain.models import AMM


@dataclass(frozen=True)
class BaseDenominated:
    def to_reserve_amount(self, amount: int, peg_multiplier: int, direction: SwapDirection) -> int:
        return amount


@dataclass(frozen=True)
class QuoteDenominated:
    # reserve units per (quote unit * peg unit); legacy snapshots use 10^10
    reserve_scale: int = AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO

    def to_reserve_amount(self, amount: int, peg_multiplier: int, direction: SwapDirection) -> int:
        scaled = amount * self.reserve_scale
        reserve_amount = scaled // peg_multiplier
        if direction == SwapDirection.REMOVE and scaled % peg_multiplier != 0:
            reserve_amount += 1
        return reserve_amount


AssetType = BaseDenominated | QuoteDenominated

BASE = BaseDenominated()
QUOTE = QuoteDenominated()


def swap(
    reserve_in: int, amount_in: int, direction: SwapDirection, invariant: int
) -> tuple[int, int]:
    """Move amount_in into (ADD) or out of (REMOVE) reserve_in.

    Returns (new_reserve_in, new_reserve_out) with
    new_reserve_out = invariant // new_reserve_in.
    """
    validate_non_negative("amount_in", amount_in)
    if direction == SwapDirection.ADD:
        new_reserve_in = reserve_in + amount_in
    else:
        new_reserve_in = reserve_in - amount_in
    if new_reserve_in <= 0:
        raise NonPositiveReserveError("reserve_in after swap", new_reserve_in)

    new_reserve_out = invariant // new_reserve_in
    if new_reserve_out <= 0:
        raise NonPositiveReserveError("reserve_out after swap", new_reserve_out)

    verify_swap_invariant(new_reserve_in, new_reserve_out, invariant)
    return new_reserve_in, new_reserve_out


def reserves_after_swap(
    reserves: CurveReserves,
    asset_type: AssetType,
    amount: int,
    direction: SwapDirection,
) -> tuple[int, int]:
    """Return (quote_asset_reserve, base_asset_reserve) after swapping amount."""
    validate_non_negative("swap amount", amount)
    if isinstance(asset_type, QuoteDenominated):
        reserve_amount = asset_type.to_reserve_amount(amount, reserves.peg_multiplier, direction)
        new_quote, new_base = swap(
            reserves.quote_asset_reserve, reserve_amount, direction, reserves.invariant
        )
    else:
        new_base, new_quote = swap(
            reserves.base_asset_reserve, amount, direction, reserves.invariant
        )
    return new_quote, new_base


def apply_swap(
    reserves: CurveReserves,
    asset_type: AssetType,
    amount: int,
    direction: SwapDirection,
) -> CurveReserves:
    new_quote, new_base = reserves_after_swap(reserves, asset_type, amount, direction)
    return CurveReserves(
        base_asset_reserve=new_base,
        quote_asset_reserve=new_quote,
        sqrt_k=reserves.sqrt_k,
        peg_multiplier=reserves.peg_multiplier,
    )


def get_swap_direction(asset_type: AssetType, direction: PositionDirection) -> SwapDirection:
    """Translate a taker's position direction into the curve-side operation.

    Long in base withdraws base; short in quote withdraws quote.
    """
    if direction == PositionDirection.LONG and isinstance(asset_type, BaseDenominated):
        return SwapDirection.REMOVE
    if direction == PositionDirection.SHORT and isinstance(asset_type, QuoteDenominated):
        return SwapDirection.REMOVE
    return SwapDirection.ADD


def calculate_price(base_asset_reserve: int, quote_asset_reserve: int, peg_multiplier: int) -> int:
    """Curve price in PRICE_PRECISION. Zero when the base reserve is empty."""
    if base_asset_reserve <= 0:
        return 0
    return quote_asset_reserve * peg_multiplier * PRICE_DIV_PEG // base_asset_reserve


def calculate_quote_asset_amount_swapped(
    quote_asset_reserve_delta: int, peg_multiplier: int, direction: SwapDirection
) -> int:
    """Convert a quote reserve delta into QUOTE_PRECISION, charging 1 on REMOVE."""
    quote_asset_amount = (
        quote_asset_reserve_delta * peg_multiplier // AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO
    )
    if direction == SwapDirection.REMOVE:
        quote_asset_amount += 1
    return quote_asset_amount


def calculate_market_open_bid_ask(
    base_asset_reserve: int,
    min_base_asset_reserve: int,
    max_base_asset_reserve: int,
    step_size: int | None = None,
) -> tuple[int, int]:
    """Base the curve can still absorb (bids, >= 0) and supply (asks, <= 0).

    A side smaller than two order steps is reported as zero.
    """
    if min_base_asset_reserve < base_asset_reserve:
        open_asks = -(base_asset_reserve - min_base_asset_reserve)
        if step_size and abs(open_asks) // 2 < step_size:
            open_asks = 0
    else:
        open_asks = 0

    if max_base_asset_reserve > base_asset_reserve:
        open_bids = max_base_asset_reserve - base_asset_reserve
        if step_size and open_bids // 2 < step_size:
            open_bids = 0
    else:
        open_bids = 0

    return open_bids, open_asks


def calculate_reserves_open_bid_ask(reserves: CurveReserves, amm: AMM) -> tuple[int, int]:
    """Open bids/asks measured from spread-adjusted reserves.

    Trading the full amount keeps the adjusted base reserve within
    [min_base_asset_reserve, max_base_asset_reserve] and never drains the
    curve below one base unit.
    """
    open_bids, open_asks = calculate_market_open_bid_ask(
        reserves.base_asset_reserve,
        amm.min_base_asset_reserve,
        amm.max_base_asset_reserve,
        amm.order_step_size,
    )
    return open_bids, max(open_asks, -(reserves.base_asset_reserve - 1))


def calculate_terminal_reserves(amm: AMM) -> tuple[int, int]:
    """(quote, base) reserves once every user position is closed against the curve."""
    net = amm.base_asset_amount_with_amm
    if net == 0:
        return amm.quote_asset_reserve, amm.base_asset_reserve
    direction = SwapDirection.ADD if net > 0 else SwapDirection.REMOVE
    new_base, new_quote = swap(
        amm.base_asset_reserve, abs(net), direction, amm.sqrt_k * amm.sqrt_k
    )
    return new_quote, new_base


def calculate_terminal_price(amm: AMM) -> int:
    quote, base = calculate_terminal_reserves(amm)
    return calculate_price(base, quote, amm.peg_multiplier)
