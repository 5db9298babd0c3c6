from dataclasses import dataclass


@dataclass(frozen=True)
class FundingEstimate:
    """Predicted hourly funding in PRICE_PRECISION * 100 (percent of oracle TWAP)."""

    mark_twap: int  # live, after stale shrink
    oracle_twap: int
    lowerbound_estimate: int  # scaled by time elapsed in the current period
    capped_alt_estimate: int  # smaller side's payment plus fee pool top-off
    interp_estimate: int  # twap spread pct / 24


@dataclass(frozen=True)
class LongShortFundingRate:
    mark_twap: int
    oracle_twap: int
    long_rate: int
    short_rate: int
