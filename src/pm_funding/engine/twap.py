"""Live TWAP extrapolation for oracle and mark prices.

Blend rule (capped-weight EMA):

    since_last = max(1, now - twap_ts)
    since_start = max(0, period - since_last)
    live = (twap * since_start + sample * since_last) // (since_start + since_last)

Once since_last >= period the stored TWAP carries no weight, so one stale
update cannot dominate. Oracle samples are clamped to twap +/- twap/3 first.
"""

from src.pm_common.fixed_point import FIVE_MINUTE
from src.pm_market.domain.models import AMM, HistoricalOracleData, OraclePriceData


def calculate_live_oracle_twap(
    hist: HistoricalOracleData,
    oracle: OraclePriceData,
    now: int,
    period: int,
) -> int:
    if period == FIVE_MINUTE and hist.last_oracle_price_twap_5min:
        oracle_twap = hist.last_oracle_price_twap_5min
    else:
        oracle_twap = hist.last_oracle_price_twap

    since_last_update = max(1, now - hist.last_oracle_price_twap_ts)
    since_start = max(0, period - since_last_update)

    clamp_range = oracle_twap // 3
    clamped_price = min(oracle_twap + clamp_range, max(oracle.price, oracle_twap - clamp_range))

    return (oracle_twap * since_start + clamped_price * since_last_update) // (
        since_start + since_last_update
    )


def calculate_live_oracle_std(amm: AMM, oracle: OraclePriceData, now: int) -> int:
    """Decayed oracle std plus the current sample's distance from the live TWAP."""
    hist = amm.historical_oracle_data
    since_last_update = max(1, now - hist.last_oracle_price_twap_ts)
    since_start = max(0, amm.funding_period - since_last_update)

    live_oracle_twap = calculate_live_oracle_twap(hist, oracle, now, amm.funding_period)
    price_delta_vs_twap = abs(oracle.price - live_oracle_twap)

    return price_delta_vs_twap + amm.oracle_std * since_start // (since_start + since_last_update)


def shrink_stale_twaps(
    amm: AMM, mark_twap: int, oracle_twap: int, now: int
) -> tuple[int, int]:
    """Pull whichever TWAP was updated less recently toward the fresher one.

    The stale TWAP is weighted by the time it went without updates.
    """
    mark_ts = amm.last_mark_price_twap_ts
    oracle_ts = amm.historical_oracle_data.last_oracle_price_twap_ts
    period = amm.funding_period

    new_mark_twap = mark_twap
    new_oracle_twap = oracle_twap

    if mark_ts > oracle_ts:
        # oracle was invalid between its last update and the last trade
        invalid_duration = max(0, mark_ts - oracle_ts)
        since_oracle_update = now - oracle_ts
        weight = max(1, min(period, max(1, period - since_oracle_update)))
        new_oracle_twap = (weight * oracle_twap + invalid_duration * mark_twap) // (
            weight + invalid_duration
        )
    elif mark_ts < oracle_ts:
        # no trades since the last mark update
        tradeless_duration = max(0, oracle_ts - mark_ts)
        since_mark_update = now - mark_ts
        weight = max(1, min(period, max(1, period - since_mark_update)))
        new_mark_twap = (weight * mark_twap + tradeless_duration * oracle_twap) // (
            weight + tradeless_duration
        )

    return new_mark_twap, new_oracle_twap
