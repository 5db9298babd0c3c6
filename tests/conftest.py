"""Shared test fixtures: a flat $10 market and its oracle sample."""

import pytest

from src.pm_common.fixed_point import AMM_RESERVE_PRECISION
from src.pm_market.domain.models import AMM, OraclePriceData, PerpMarket

NOW = 1_688_881_915
RESERVE = 1_000 * AMM_RESERVE_PRECISION  # 1000 base on each side of the curve
PEG = 10_000_000  # $10.00


def make_market(
    reserve: int = RESERVE,
    peg: int = PEG,
    market_index: int = 0,
    **amm_fields: int,
) -> PerpMarket:
    """Balanced curve priced at `peg`, bounded at half / double the base reserve."""
    fields = {
        "min_base_asset_reserve": reserve // 2,
        "max_base_asset_reserve": reserve * 2,
        "terminal_quote_asset_reserve": reserve,
    }
    fields.update(amm_fields)
    amm = AMM(
        base_asset_reserve=reserve,
        quote_asset_reserve=reserve,
        sqrt_k=reserve,
        peg_multiplier=peg,
        **fields,
    )
    return PerpMarket(market_index=market_index, amm=amm)


@pytest.fixture
def market() -> PerpMarket:
    return make_market()


@pytest.fixture
def oracle() -> OraclePriceData:
    return OraclePriceData(price=PEG, confidence=1, slot=42)
