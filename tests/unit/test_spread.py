"""Tests for pm_amm.engine.spread against reference spread vectors."""

import pytest

from src.pm_amm.engine.pricing import calculate_bid_ask_price
from src.pm_amm.engine.spread import (
    calculate_effective_leverage,
    calculate_inventory_scale,
    calculate_max_spread,
    calculate_spread,
    calculate_spread_bn,
    calculate_spread_reserves,
    calculate_spread_terms,
)
from src.pm_common.errors import ZeroSpreadDivisorError
from src.pm_common.fixed_point import AMM_RESERVE_PRECISION, QUOTE_PRECISION
from src.pm_market.domain.models import OraclePriceData
from tests.conftest import NOW, PEG, RESERVE, make_market

R = AMM_RESERVE_PRECISION


class TestInventoryScale:
    def test_no_inventory_is_one(self) -> None:
        assert calculate_inventory_scale(0, R, R // 2, R * 3 // 2, 250, 30000) == 1

    def test_partial_skew(self) -> None:
        baa = R // 5
        assert calculate_inventory_scale(baa, R + baa, R // 2, R * 3 // 2, 250, 30000 * 2) == 160.99984

    @pytest.mark.parametrize(
        ("baa", "max_reserve"),
        [
            (855329058, R),
            (855329058, R * 3 // 2),
            (-855329058, R * 3 // 2),
        ],
    )
    def test_full_skew_caps_at_max_spread(self, baa: int, max_reserve: int) -> None:
        iscale = calculate_inventory_scale(baa, R + baa, R // 2, max_reserve, 250, 30000)
        assert iscale == 120
        assert 250 * iscale == 30000

    def test_bonk_scale(self) -> None:
        iscale = calculate_inventory_scale(
            30228000000000000,
            2496788386034912600,
            2443167585342470000,
            2545411471321696000,
            3500,
            100000,
        )
        assert iscale == 18.762285
        assert (3500 * iscale) / 1e6 == 0.06566799749999999


class TestSpreadVectors:
    def test_various_spreads(self) -> None:
        args = (
            25000,  # base spread
            0,  # last oracle reserve price spread pct
            0,  # last oracle conf pct
            30000,  # max spread
            R * 100,  # quote asset reserve
            R * 100,  # terminal quote asset reserve
            13_455_000,  # peg
            0,  # base asset amount with amm
            13_455_000,  # reserve price
            1,  # total fee minus distributions
            QUOTE_PRECISION * 2,  # net revenue since last funding
            R * 100,  # base asset reserve
            R * 90,  # min base asset reserve
            R * 110,  # max base asset reserve
            450_000,  # mark std
            550_000,  # oracle std
            QUOTE_PRECISION * 20,  # long intensity
            QUOTE_PRECISION * 2,  # short intensity
            QUOTE_PRECISION * 25,  # 24h volume
        )
        long_spread, short_spread = calculate_spread_bn(*args)
        terms = calculate_spread_terms(*args)
        assert long_spread == 14864
        assert short_spread == 12500
        assert terms.long_spread == long_spread
        assert terms.short_spread == short_spread

    def test_inventory_and_leverage(self) -> None:
        terms = calculate_spread_terms(
            300,
            0,
            484,
            47500,
            923807816209694,
            925117623772584,
            13731157,
            -1314027016625,
            13667686,
            115876379475,
            91316628,
            928097825691666,
            907979542352912,
            945977491145601,
            161188,
            1459632439,
            12358265776,
            72230366233,
            432067603632,
        )
        assert terms.effective_leverage_capped >= 1.0002
        assert terms.inventory_spread_scale == 1.73492
        assert terms.long_spread == 4262
        assert terms.short_spread == 43238

    def test_corner_case(self) -> None:
        terms = calculate_spread_terms(
            1000,
            5555,
            1131,
            20000,
            1009967115003047,
            1009811402660255,
            13460124,
            15328930153,
            13667686,
            1235066973,
            88540713,
            994097717724176,
            974077854655784,
            1014841945381208,
            103320,
            59975,
            768323534,
            243875031,
            130017761029,
        )
        assert terms.effective_leverage_capped <= 1.000001
        assert terms.inventory_spread_scale == 1.013527
        assert terms.long_spread == 1146
        assert terms.short_spread == 6686

    def test_total_never_exceeds_max_target(self) -> None:
        terms = calculate_spread_terms(
            1000, 5555, 1131, 20000, 1009967115003047, 1009811402660255, 13460124,
            15328930153, 13667686, 1235066973, 88540713, 994097717724176,
            974077854655784, 1014841945381208, 103320, 59975, 768323534,
            243875031, 130017761029,
        )
        assert 0 <= terms.long_spread
        assert 0 <= terms.short_spread
        assert terms.long_spread + terms.short_spread <= terms.max_target_spread


class TestSpreadHelpers:
    def test_max_spread_from_margin_ratio(self) -> None:
        # 10% initial margin -> 100_000 in spread precision
        assert calculate_max_spread(1000) == 100_000

    def test_effective_leverage_without_gap(self) -> None:
        lev = calculate_effective_leverage(0, R, R, PEG, 0, PEG, 1000)
        assert lev == 1 / QUOTE_PRECISION


class TestLiveSpread:
    def test_zero_intensity_uses_half_base_spread(self) -> None:
        market = make_market(base_spread=1000)
        assert calculate_spread(market.amm, OraclePriceData(price=PEG), NOW) == (500, 500)

    def test_no_spread_returns_raw_reserves(self) -> None:
        market = make_market()
        bid, ask = calculate_spread_reserves(market.amm, OraclePriceData(price=PEG), NOW)
        assert bid.quote_asset_reserve == RESERVE
        assert ask.quote_asset_reserve == RESERVE

    def test_spread_reserves_straddle_reserve_price(self) -> None:
        market = make_market(base_spread=1000)
        bid_price, ask_price = calculate_bid_ask_price(market.amm, OraclePriceData(price=PEG), NOW)
        assert bid_price < PEG < ask_price
        assert ask_price == 10_005_000

    def test_half_spread_above_precision_raises(self) -> None:
        market = make_market(base_spread=5_000_000)
        with pytest.raises(ZeroSpreadDivisorError):
            calculate_spread_reserves(market.amm, OraclePriceData(price=PEG), NOW)
