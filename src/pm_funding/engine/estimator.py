"""Predicted funding rate from live mark and oracle TWAPs.

    twap_spread     = mark_twap - oracle_twap  (clamped by contract tier)
    twap_spread_pct = twap_spread * PRICE_PRECISION * 100 / oracle_twap
    interp          = twap_spread_pct / 24
    lowerbound      = interp scaled by min(1h, time since last funding)

When open interest is lopsided and the larger side receives funding, the
smaller side's payment plus a share of the fee pool caps what the larger
side can be paid (capped estimate).
"""

import logging

from src.pm_amm.engine.pricing import calculate_bid_ask_price
from src.pm_common.enums import ContractTier, FundingEstimateMethod, MarketStatus
from src.pm_common.fixed_point import (
    AMM_RESERVE_PRECISION,
    ONE_HOUR,
    PRICE_PRECISION,
    QUOTE_PRECISION,
    clamp,
    div_trunc,
)
from src.pm_funding.domain.models import FundingEstimate, LongShortFundingRate
from src.pm_funding.engine.twap import calculate_live_oracle_twap, shrink_stale_twaps
from src.pm_market.domain.models import AMM, OraclePriceData, PerpMarket

logger = logging.getLogger(__name__)

HOURS_IN_DAY = 24


def calculate_live_mark_twap(
    amm: AMM,
    oracle: OraclePriceData,
    now: int,
    mark_price: int | None = None,
    period: int = ONE_HOUR,
) -> int:
    """Blend the stored mark TWAP with the current mark (bid/ask midpoint by default)."""
    since_last_mark_change = now - amm.last_mark_price_twap_ts
    weight = max(period, max(0, period - since_last_mark_change))

    if mark_price is None:
        bid, ask = calculate_bid_ask_price(amm, oracle, now)
        mark_price = (bid + ask) // 2

    return (weight * amm.last_mark_price_twap + since_last_mark_change * mark_price) // (
        since_last_mark_change + weight
    )


def calculate_funding_pool(amm: AMM) -> int:
    """Fees available to top off funding: a third of fees above half of exchange fees."""
    total_fee_lb = amm.total_exchange_fee // 2
    return max(0, div_trunc(amm.total_fee_minus_distributions - total_fee_lb, 3))


def get_max_price_divergence_for_funding_rate(market: PerpMarket, oracle_twap: int) -> int:
    if market.contract_tier in (ContractTier.A, ContractTier.B):
        return oracle_twap // 33
    if market.contract_tier == ContractTier.C:
        return oracle_twap // 20
    return oracle_twap // 10


def calculate_all_estimated_funding_rate(
    market: PerpMarket,
    oracle: OraclePriceData,
    now: int,
    mark_price: int | None = None,
) -> FundingEstimate:
    if market.status == MarketStatus.UNINITIALIZED:
        return FundingEstimate(0, 0, 0, 0, 0)

    amm = market.amm
    pay_freq = amm.funding_period

    live_mark_twap = calculate_live_mark_twap(amm, oracle, now, mark_price, amm.funding_period)
    live_oracle_twap = calculate_live_oracle_twap(
        amm.historical_oracle_data, oracle, now, amm.funding_period
    )
    mark_twap, oracle_twap = shrink_stale_twaps(amm, live_mark_twap, live_oracle_twap, now)
    if oracle_twap <= 0:
        # no oracle history yet: nothing to measure the premium against
        logger.debug("Funding estimate market=%d skipped: oracle twap %d", market.market_index, oracle_twap)
        return FundingEstimate(mark_twap, oracle_twap, 0, 0, 0)

    twap_spread = mark_twap - oracle_twap
    max_divergence = get_max_price_divergence_for_funding_rate(market, oracle_twap)
    clamped_spread = clamp(twap_spread, -max_divergence, max_divergence)

    twap_spread_pct = div_trunc(clamped_spread * PRICE_PRECISION * 100, oracle_twap)

    time_since_last_update = now - amm.last_funding_rate_ts
    lowerbound_est = div_trunc(
        div_trunc(
            div_trunc(twap_spread_pct * pay_freq * min(ONE_HOUR, time_since_last_update), ONE_HOUR),
            ONE_HOUR,
        ),
        HOURS_IN_DAY,
    )
    interp_est = div_trunc(twap_spread_pct, HOURS_IN_DAY)
    interp_rate_quote = div_trunc(interp_est, PRICE_PRECISION // QUOTE_PRECISION)

    fee_pool_size = calculate_funding_pool(amm)
    if interp_rate_quote < 0:
        fee_pool_size = -fee_pool_size

    long_oi = abs(amm.base_asset_amount_long)
    short_oi = abs(amm.base_asset_amount_short)
    if long_oi > short_oi:
        larger_side, smaller_side = long_oi, short_oi
        if twap_spread > 0:
            # longs pay: no cap on what shorts receive
            return FundingEstimate(mark_twap, oracle_twap, lowerbound_est, interp_est, interp_est)
    elif long_oi < short_oi:
        larger_side, smaller_side = short_oi, long_oi
        if twap_spread < 0:
            return FundingEstimate(mark_twap, oracle_twap, lowerbound_est, interp_est, interp_est)
    else:
        return FundingEstimate(mark_twap, oracle_twap, lowerbound_est, interp_est, interp_est)

    # larger side receives: bounded by smaller side's payment plus the fee pool
    capped_alt_est = div_trunc(smaller_side * twap_spread, HOURS_IN_DAY)
    fee_pool_top_off = fee_pool_size * (PRICE_PRECISION // QUOTE_PRECISION) * AMM_RESERVE_PRECISION
    capped_alt_est = div_trunc(capped_alt_est + fee_pool_top_off, larger_side)
    capped_alt_est = div_trunc(capped_alt_est * PRICE_PRECISION * 100, oracle_twap)
    if abs(capped_alt_est) >= abs(interp_est):
        capped_alt_est = interp_est

    logger.debug(
        "Funding estimate market=%d interp=%d capped=%d lowerbound=%d",
        market.market_index,
        interp_est,
        capped_alt_est,
        lowerbound_est,
    )
    return FundingEstimate(mark_twap, oracle_twap, lowerbound_est, capped_alt_est, interp_est)


def calculate_long_short_funding_rate_and_live_twaps(
    market: PerpMarket,
    oracle: OraclePriceData,
    now: int,
    mark_price: int | None = None,
) -> LongShortFundingRate:
    """The capped estimate applies to the side with more open interest."""
    est = calculate_all_estimated_funding_rate(market, oracle, now, mark_price)
    long_oi = abs(market.amm.base_asset_amount_long)
    short_oi = abs(market.amm.base_asset_amount_short)
    if long_oi > short_oi:
        long_rate, short_rate = est.capped_alt_estimate, est.interp_estimate
    elif long_oi < short_oi:
        long_rate, short_rate = est.interp_estimate, est.capped_alt_estimate
    else:
        long_rate, short_rate = est.interp_estimate, est.interp_estimate
    return LongShortFundingRate(est.mark_twap, est.oracle_twap, long_rate, short_rate)


def calculate_long_short_funding_rate(
    market: PerpMarket,
    oracle: OraclePriceData,
    now: int,
    mark_price: int | None = None,
) -> tuple[int, int]:
    rates = calculate_long_short_funding_rate_and_live_twaps(market, oracle, now, mark_price)
    return rates.long_rate, rates.short_rate


def calculate_estimated_funding_rate(
    market: PerpMarket,
    oracle: OraclePriceData,
    now: int,
    mark_price: int | None = None,
    period_adjustment: int = 1,
    method: FundingEstimateMethod = FundingEstimateMethod.INTERPOLATED,
) -> int:
    """One estimate scaled by period_adjustment (e.g. 24 for a daily rate)."""
    est = calculate_all_estimated_funding_rate(market, oracle, now, mark_price)
    if method == FundingEstimateMethod.LOWERBOUND:
        return est.lowerbound_estimate * period_adjustment
    if method == FundingEstimateMethod.CAPPED:
        return est.capped_alt_estimate * period_adjustment
    return est.interp_estimate * period_adjustment
