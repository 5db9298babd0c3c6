"""Directional spread and inventory model.

Long (ask) and short (bid) spreads are widened independently around the
curve's reserve price, then converted into spread-adjusted reserves:

1. Volatility: max(base_spread / 2, vol term scaled by trade intensity).
2. Oracle divergence: widen the side the oracle is moving away from.
3. Inventory scale: multiply the side that grows the AMM's position.
4. Effective leverage: multiply the same side by 1 + leverage, capped at 10x.
5. Revenue retreat: widen when the AMM is losing money since last funding.
6. Cap: long + short <= max target spread, proportions preserved.

Every step matches the authoritative client math including its float
rounding, since quoted prices must match exactly.
"""

import math

from src.pm_amm.domain.invariants import verify_spread_bounds
from src.pm_amm.domain.models import CurveReserves, SpreadTerms
from src.pm_amm.engine.curve import calculate_market_open_bid_ask, calculate_price
from src.pm_common.errors import ZeroSpreadDivisorError
from src.pm_common.fixed_point import (
    AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO,
    AMM_TO_QUOTE_PRECISION_RATIO,
    BID_ASK_SPREAD_PRECISION,
    DEFAULT_REVENUE_SINCE_LAST_FUNDING_SPREAD_RETREAT,
    MARGIN_PRECISION,
    PERCENTAGE_PRECISION,
    PRICE_PRECISION,
    QUOTE_PRECISION,
    clamp,
    div_trunc,
)
from src.pm_funding.engine.twap import calculate_live_oracle_std
from src.pm_market.domain.models import AMM, OraclePriceData

MAX_BID_ASK_INVENTORY_SKEW_FACTOR = 10 * BID_ASK_SPREAD_PRECISION
MAX_SPREAD_SCALE = 10


def calculate_inventory_liquidity_ratio(
    base_asset_amount_with_amm: int,
    base_asset_reserve: int,
    min_base_asset_reserve: int,
    max_base_asset_reserve: int,
) -> int:
    """|position| relative to the thinner side of open liquidity, in PERCENTAGE_PRECISION."""
    open_bids, open_asks = calculate_market_open_bid_ask(
        base_asset_reserve, min_base_asset_reserve, max_base_asset_reserve
    )
    min_side_liquidity = min(abs(open_bids), abs(open_asks))
    ratio = abs(
        div_trunc(base_asset_amount_with_amm * PERCENTAGE_PRECISION, max(min_side_liquidity, 1))
    )
    return min(ratio, PERCENTAGE_PRECISION)


def calculate_inventory_scale(
    base_asset_amount_with_amm: int,
    base_asset_reserve: int,
    min_base_asset_reserve: int,
    max_base_asset_reserve: int,
    directional_spread: float,
    max_spread: int,
) -> float:
    """Spread multiplier for inventory skew; 1 when the AMM holds no position."""
    if base_asset_amount_with_amm == 0:
        return 1

    inventory_ratio = calculate_inventory_liquidity_ratio(
        base_asset_amount_with_amm,
        base_asset_reserve,
        min_base_asset_reserve,
        max_base_asset_reserve,
    )
    # at full skew the directional spread alone may reach max_spread
    inventory_scale_max = max(
        MAX_BID_ASK_INVENTORY_SKEW_FACTOR,
        max_spread * BID_ASK_SPREAD_PRECISION // int(max(directional_spread, 1)),
    )
    inventory_scale_capped = min(
        inventory_scale_max,
        BID_ASK_SPREAD_PRECISION + inventory_scale_max * inventory_ratio // PERCENTAGE_PRECISION,
    )
    return inventory_scale_capped / BID_ASK_SPREAD_PRECISION


def calculate_effective_leverage(
    base_spread: int,
    quote_asset_reserve: int,
    terminal_quote_asset_reserve: int,
    peg_multiplier: int,
    net_base_asset_amount: int,
    reserve_price: int,
    total_fee_minus_distributions: int,
) -> float:
    net_base_asset_value = div_trunc(
        (quote_asset_reserve - terminal_quote_asset_reserve) * peg_multiplier,
        AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO,
    )
    local_base_asset_value = div_trunc(
        net_base_asset_amount * reserve_price,
        AMM_TO_QUOTE_PRECISION_RATIO * PRICE_PRECISION,
    )
    effective_gap = max(0, local_base_asset_value - net_base_asset_value)
    return effective_gap / (max(0, total_fee_minus_distributions) + 1) + 1 / QUOTE_PRECISION


def calculate_max_spread(margin_ratio_initial: int) -> int:
    return margin_ratio_initial * (BID_ASK_SPREAD_PRECISION // MARGIN_PRECISION)


def calculate_vol_spread(
    last_oracle_conf_pct: int,
    reserve_price: int,
    mark_std: int,
    oracle_std: int,
    long_intensity: int,
    short_intensity: int,
    volume_24h: int,
) -> tuple[int, int]:
    """(long_vol_spread, short_vol_spread) in BID_ASK_SPREAD_PRECISION."""
    market_avg_std_pct = (mark_std + oracle_std) * PERCENTAGE_PRECISION // reserve_price // 2
    vol_spread = max(last_oracle_conf_pct, market_avg_std_pct // 2)

    clamp_min = PERCENTAGE_PRECISION // 100
    clamp_max = PERCENTAGE_PRECISION * 16 // 10

    long_factor = clamp(
        long_intensity * PERCENTAGE_PRECISION // max(1, volume_24h), clamp_min, clamp_max
    )
    short_factor = clamp(
        short_intensity * PERCENTAGE_PRECISION // max(1, volume_24h), clamp_min, clamp_max
    )

    long_vol_spread = max(last_oracle_conf_pct, vol_spread * long_factor // PERCENTAGE_PRECISION)
    short_vol_spread = max(last_oracle_conf_pct, vol_spread * short_factor // PERCENTAGE_PRECISION)
    return long_vol_spread, short_vol_spread


def calculate_spread_terms(
    base_spread: int,
    last_oracle_reserve_price_spread_pct: int,
    last_oracle_conf_pct: int,
    max_spread: int,
    quote_asset_reserve: int,
    terminal_quote_asset_reserve: int,
    peg_multiplier: int,
    base_asset_amount_with_amm: int,
    reserve_price: int,
    total_fee_minus_distributions: int,
    net_revenue_since_last_funding: int,
    base_asset_reserve: int,
    min_base_asset_reserve: int,
    max_base_asset_reserve: int,
    mark_std: int,
    oracle_std: int,
    long_intensity: int,
    short_intensity: int,
    volume_24h: int,
) -> SpreadTerms:
    long_vol_spread, short_vol_spread = calculate_vol_spread(
        last_oracle_conf_pct,
        reserve_price,
        mark_std,
        oracle_std,
        long_intensity,
        short_intensity,
        volume_24h,
    )

    long_spread: float = max(base_spread / 2, long_vol_spread)
    short_spread: float = max(base_spread / 2, short_vol_spread)

    divergence = abs(last_oracle_reserve_price_spread_pct)
    if last_oracle_reserve_price_spread_pct > 0:
        short_spread = max(short_spread, divergence + short_vol_spread)
    elif last_oracle_reserve_price_spread_pct < 0:
        long_spread = max(long_spread, divergence + long_vol_spread)
    long_spread_w_ps, short_spread_w_ps = long_spread, short_spread

    max_target_spread = math.floor(max(max_spread, divergence))

    inventory_spread_scale = calculate_inventory_scale(
        base_asset_amount_with_amm,
        base_asset_reserve,
        min_base_asset_reserve,
        max_base_asset_reserve,
        long_spread if base_asset_amount_with_amm > 0 else short_spread,
        max_target_spread,
    )
    if base_asset_amount_with_amm > 0:
        long_spread *= inventory_spread_scale
    elif base_asset_amount_with_amm < 0:
        short_spread *= inventory_spread_scale
    long_spread_w_inv_scale, short_spread_w_inv_scale = long_spread, short_spread

    effective_leverage = 0.0
    effective_leverage_capped = 0.0
    if total_fee_minus_distributions > 0:
        effective_leverage = calculate_effective_leverage(
            base_spread,
            quote_asset_reserve,
            terminal_quote_asset_reserve,
            peg_multiplier,
            base_asset_amount_with_amm,
            reserve_price,
            total_fee_minus_distributions,
        )
        effective_leverage_capped = min(MAX_SPREAD_SCALE, 1 + effective_leverage)
        if base_asset_amount_with_amm > 0:
            long_spread = math.floor(long_spread * effective_leverage_capped)
        else:
            short_spread = math.floor(short_spread * effective_leverage_capped)
    else:
        # no fee cushion: quote as wide as allowed, the cap below trims it
        long_spread *= MAX_SPREAD_SCALE
        short_spread *= MAX_SPREAD_SCALE
    long_spread_w_el, short_spread_w_el = long_spread, short_spread

    revenue_retreat_amount: float = 0
    half_revenue_retreat_amount: float = 0
    retreat_threshold = DEFAULT_REVENUE_SINCE_LAST_FUNDING_SPREAD_RETREAT
    if net_revenue_since_last_funding < retreat_threshold:
        max_retreat = max_target_spread / 10
        revenue_retreat_amount = max_retreat
        if net_revenue_since_last_funding >= retreat_threshold * 1000:
            revenue_retreat_amount = min(
                max_retreat,
                math.floor(
                    base_spread * abs(net_revenue_since_last_funding) / abs(retreat_threshold)
                ),
            )
        half_revenue_retreat_amount = math.floor(revenue_retreat_amount / 2)

        if base_asset_amount_with_amm > 0:
            long_spread += revenue_retreat_amount
            short_spread += half_revenue_retreat_amount
        elif base_asset_amount_with_amm < 0:
            long_spread += half_revenue_retreat_amount
            short_spread += revenue_retreat_amount
        else:
            long_spread += half_revenue_retreat_amount
            short_spread += half_revenue_retreat_amount
    long_spread_w_rev_retreat, short_spread_w_rev_retreat = long_spread, short_spread

    total_spread = long_spread + short_spread
    if total_spread > max_target_spread:
        if long_spread > short_spread:
            long_spread = math.ceil(long_spread * max_target_spread / total_spread)
            short_spread = math.floor(max_target_spread - long_spread)
        else:
            short_spread = math.ceil(short_spread * max_target_spread / total_spread)
            long_spread = math.floor(max_target_spread - short_spread)

    verify_spread_bounds(long_spread, short_spread, max_target_spread)

    return SpreadTerms(
        long_vol_spread=long_vol_spread,
        short_vol_spread=short_vol_spread,
        long_spread_w_ps=long_spread_w_ps,
        short_spread_w_ps=short_spread_w_ps,
        max_target_spread=max_target_spread,
        inventory_spread_scale=inventory_spread_scale,
        long_spread_w_inv_scale=long_spread_w_inv_scale,
        short_spread_w_inv_scale=short_spread_w_inv_scale,
        effective_leverage=effective_leverage,
        effective_leverage_capped=effective_leverage_capped,
        long_spread_w_el=long_spread_w_el,
        short_spread_w_el=short_spread_w_el,
        revenue_retreat_amount=revenue_retreat_amount,
        half_revenue_retreat_amount=half_revenue_retreat_amount,
        long_spread_w_rev_retreat=long_spread_w_rev_retreat,
        short_spread_w_rev_retreat=short_spread_w_rev_retreat,
        total_spread=total_spread,
        long_spread=long_spread,
        short_spread=short_spread,
    )


def calculate_spread_bn(*args: int) -> tuple[float, float]:
    """(long_spread, short_spread); positional arguments as calculate_spread_terms."""
    terms = calculate_spread_terms(*args)
    return terms.long_spread, terms.short_spread


def calculate_spread(
    amm: AMM,
    oracle: OraclePriceData,
    now: int,
    reserve_price: int | None = None,
) -> tuple[float, float]:
    """Live (long, short) spread for a market snapshot at time `now`."""
    if amm.base_spread == 0 or amm.curve_update_intensity == 0:
        return amm.base_spread / 2, amm.base_spread / 2

    if reserve_price is None:
        reserve_price = calculate_price(
            amm.base_asset_reserve, amm.quote_asset_reserve, amm.peg_multiplier
        )

    target_mark_spread_pct = div_trunc(
        (reserve_price - oracle.price) * BID_ASK_SPREAD_PRECISION, reserve_price
    )
    conf_interval_pct = oracle.confidence * BID_ASK_SPREAD_PRECISION // reserve_price
    live_oracle_std = calculate_live_oracle_std(amm, oracle, now)

    return calculate_spread_bn(
        amm.base_spread,
        target_mark_spread_pct,
        conf_interval_pct,
        amm.max_spread,
        amm.quote_asset_reserve,
        amm.terminal_quote_asset_reserve,
        amm.peg_multiplier,
        amm.base_asset_amount_with_amm,
        reserve_price,
        amm.total_fee_minus_distributions,
        amm.net_revenue_since_last_funding,
        amm.base_asset_reserve,
        amm.min_base_asset_reserve,
        amm.max_base_asset_reserve,
        amm.mark_std,
        live_oracle_std,
        amm.long_intensity_volume,
        amm.short_intensity_volume,
        amm.volume_24h,
    )


def _spread_reserve(spread: float, amm: AMM) -> CurveReserves:
    """Shift the quote reserve by spread/2 (positive widens the ask side)."""
    raw = CurveReserves.from_amm(amm)
    if spread == 0:
        return raw

    spread_fraction = int(spread / 2)
    if spread_fraction == 0:
        spread_fraction = 1 if spread >= 0 else -1

    divisor = div_trunc(BID_ASK_SPREAD_PRECISION, spread_fraction)
    if divisor == 0:
        raise ZeroSpreadDivisorError(spread_fraction)

    delta = div_trunc(amm.quote_asset_reserve, divisor)
    if delta >= 0:
        quote_asset_reserve = amm.quote_asset_reserve + abs(delta)
    else:
        quote_asset_reserve = amm.quote_asset_reserve - abs(delta)

    return CurveReserves(
        base_asset_reserve=raw.invariant // quote_asset_reserve,
        quote_asset_reserve=quote_asset_reserve,
        sqrt_k=amm.sqrt_k,
        peg_multiplier=amm.peg_multiplier,
    )


def calculate_spread_reserves(
    amm: AMM, oracle: OraclePriceData, now: int
) -> tuple[CurveReserves, CurveReserves]:
    """(bid_reserves, ask_reserves) whose curve price is the bid/ask quote."""
    reserve_price = calculate_price(
        amm.base_asset_reserve, amm.quote_asset_reserve, amm.peg_multiplier
    )
    long_spread, short_spread = calculate_spread(amm, oracle, now, reserve_price)
    ask_reserves = _spread_reserve(long_spread, amm)
    bid_reserves = _spread_reserve(-short_spread, amm)
    return bid_reserves, ask_reserves
