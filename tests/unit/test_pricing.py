from src.pm_amm.engine.pricing import (
    calculate_ask_price,
    calculate_bid_ask_price,
    calculate_bid_price,
    calculate_reserve_price,
    calculate_spread_reserves_for_direction,
)
from src.pm_common.enums import PositionDirection
from src.pm_market.domain.models import OraclePriceData
from tests.conftest import NOW, PEG, make_market


class TestReservePrice:
    def test_balanced_curve(self) -> None:
        assert calculate_reserve_price(make_market().amm) == PEG

    def test_ignores_spread(self) -> None:
        assert calculate_reserve_price(make_market(base_spread=1000).amm) == PEG


class TestBidAsk:
    def test_no_spread_collapses_to_reserve_price(self) -> None:
        amm = make_market().amm
        assert calculate_bid_ask_price(amm, OraclePriceData(price=PEG), NOW) == (PEG, PEG)

    def test_single_side_helpers_agree(self) -> None:
        amm = make_market(base_spread=1000).amm
        oracle = OraclePriceData(price=PEG)
        bid, ask = calculate_bid_ask_price(amm, oracle, NOW)
        assert calculate_bid_price(amm, oracle, NOW) == bid == 9_995_000
        assert calculate_ask_price(amm, oracle, NOW) == ask == 10_005_000


class TestReservesForDirection:
    def test_long_trades_against_ask_side(self) -> None:
        amm = make_market(base_spread=1000).amm
        oracle = OraclePriceData(price=PEG)
        long_reserves = calculate_spread_reserves_for_direction(amm, PositionDirection.LONG, oracle, NOW)
        short_reserves = calculate_spread_reserves_for_direction(amm, PositionDirection.SHORT, oracle, NOW)
        assert long_reserves.quote_asset_reserve > amm.quote_asset_reserve
        assert short_reserves.quote_asset_reserve < amm.quote_asset_reserve
