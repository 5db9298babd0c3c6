"""Domain models for pm_market - decoded, immutable market snapshots.

Snapshots are supplied fresh by the account-state collaborator for every call
and are never mutated here. Derived state (spread reserves, post-swap curve)
is built with dataclasses.replace or returned as new values.
"""

from dataclasses import dataclass, field

from src.pm_common.enums import ContractTier, MarketStatus
from src.pm_common.fixed_point import ONE_HOUR


@dataclass(frozen=True)
class OraclePriceData:
    price: int  # PRICE_PRECISION
    confidence: int = 0  # PRICE_PRECISION
    slot: int = 0
    has_sufficient_number_of_data_points: bool = True


@dataclass(frozen=True)
class HistoricalOracleData:
    last_oracle_price: int = 0
    last_oracle_conf: int = 0
    last_oracle_delay: int = 0
    last_oracle_price_twap: int = 0
    last_oracle_price_twap_5min: int = 0
    last_oracle_price_twap_ts: int = 0


@dataclass(frozen=True)
class AMM:
    """Virtual AMM state for one perp market."""

    # curve
    base_asset_reserve: int  # AMM_RESERVE_PRECISION
    quote_asset_reserve: int  # AMM_RESERVE_PRECISION
    sqrt_k: int  # AMM_RESERVE_PRECISION
    peg_multiplier: int  # PEG_PRECISION
    terminal_quote_asset_reserve: int = 0
    min_base_asset_reserve: int = 0
    max_base_asset_reserve: int = 0
    order_step_size: int = 0

    # inventory / open interest (BASE_PRECISION, signed)
    base_asset_amount_with_amm: int = 0
    base_asset_amount_long: int = 0
    base_asset_amount_short: int = 0

    # fees and revenue (QUOTE_PRECISION, signed)
    total_fee_minus_distributions: int = 0
    total_exchange_fee: int = 0
    net_revenue_since_last_funding: int = 0

    # TWAPs (PRICE_PRECISION) and their timestamps (unix seconds)
    historical_oracle_data: HistoricalOracleData = field(default_factory=HistoricalOracleData)
    last_mark_price_twap: int = 0
    last_bid_price_twap: int = 0
    last_ask_price_twap: int = 0
    last_mark_price_twap_ts: int = 0

    # funding
    funding_period: int = ONE_HOUR
    last_funding_rate_ts: int = 0
    cumulative_funding_rate_long: int = 0  # FUNDING_RATE_PRECISION
    cumulative_funding_rate_short: int = 0

    # spread configuration and inputs
    base_spread: int = 0  # BID_ASK_SPREAD_PRECISION
    max_spread: int = 0
    curve_update_intensity: int = 0
    mark_std: int = 0  # PRICE_PRECISION
    oracle_std: int = 0
    long_intensity_volume: int = 0  # QUOTE_PRECISION
    short_intensity_volume: int = 0
    volume_24h: int = 0
    last_oracle_reserve_price_spread_pct: int = 0
    last_oracle_conf_pct: int = 0


@dataclass(frozen=True)
class PerpMarket:
    market_index: int
    amm: AMM
    status: MarketStatus = MarketStatus.ACTIVE
    contract_tier: ContractTier = ContractTier.SPECULATIVE
    margin_ratio_initial: int = 1000  # MARGIN_PRECISION
