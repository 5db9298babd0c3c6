import pytest

from src.pm_common.enums import LiquiditySource, PositionDirection
from src.pm_funding.domain.models import FundingEstimate
from src.pm_market.application.schemas import (
    EntryPriceResponse,
    FundingRateResponse,
    L2LevelOut,
    L2SnapshotResponse,
    TargetPriceTradeResponse,
)
from src.pm_matching.domain.models import EntryPriceEstimate, L2Level, L2Snapshot
from src.pm_trade.domain.models import TargetPriceTrade


def _level(price: int = 10_000_000, vamm: int = 2 * 10**9, dlob: int = 0) -> L2Level:
    sources = {LiquiditySource.VAMM: vamm}
    if dlob:
        sources[LiquiditySource.DLOB] = dlob
    return L2Level(price=price, size=vamm + dlob, sources=sources)


class TestL2Schemas:
    def test_level_display_values(self) -> None:
        out = L2LevelOut.from_domain(_level())
        assert out.price == 10_000_000
        assert out.price_display == 10.0
        assert out.size_display == 2.0

    def test_sources_keyed_by_name(self) -> None:
        out = L2LevelOut.from_domain(_level(vamm=3 * 10**9, dlob=10**9))
        assert out.sources == {"VAMM": 3 * 10**9, "DLOB": 10**9}
        assert out.size == 4 * 10**9

    def test_snapshot(self) -> None:
        snapshot = L2Snapshot(bids=[_level(9_990_000)], asks=[_level(10_010_000), _level(10_020_000)], slot=42)
        resp = L2SnapshotResponse.from_domain(3, snapshot)
        assert resp.market_index == 3
        assert resp.slot == 42
        assert len(resp.bids) == 1
        assert [lv.price for lv in resp.asks] == [10_010_000, 10_020_000]

    def test_snapshot_serializes(self) -> None:
        resp = L2SnapshotResponse.from_domain(0, L2Snapshot(bids=[_level()], asks=[], slot=1))
        data = resp.model_dump()
        assert data["bids"][0]["sources"] == {"VAMM": 2 * 10**9}
        assert data["asks"] == []


class TestEntryPriceResponse:
    def test_from_domain(self) -> None:
        estimate = EntryPriceEstimate(
            entry_price=10_099_999,
            price_impact=9_999,
            best_price=10_000_000,
            worst_price=10_201_000,
            base_filled=9_900_990_100,
            quote_filled=100_000_000,
        )
        resp = EntryPriceResponse.from_domain(0, "LONG", estimate, fee=100_000, fully_filled=True)
        assert resp.entry_price_display == pytest.approx(10.099999)
        assert resp.price_impact_display == pytest.approx(0.009999)
        assert resp.base_filled_display == pytest.approx(9.9009901)
        assert resp.quote_filled_display == 100.0
        assert resp.fee_display == 0.1
        assert resp.fully_filled


class TestTargetPriceTradeResponse:
    def test_direction_serialized_as_value(self) -> None:
        trade = TargetPriceTrade(
            direction=PositionDirection.LONG,
            trade_size=246_950_765,
            entry_price=10_246_950,
            target_price=10_500_000,
            resulting_price=10_499_999,
        )
        resp = TargetPriceTradeResponse.from_domain(0, trade)
        assert resp.direction == "LONG"
        assert resp.target_price_display == 10.5
        assert resp.resulting_price_display == pytest.approx(10.499999)


class TestFundingRateResponse:
    def test_negative_rate_display(self) -> None:
        estimate = FundingEstimate(
            mark_twap=1_222_131,
            oracle_twap=1_222_586,
            lowerbound_estimate=-1_000,
            capped_alt_estimate=-1_550,
            interp_estimate=-1_550,
        )
        resp = FundingRateResponse.from_domain(
            0, "INTERPOLATED", -1_550, estimate, long_rate=-1_550, short_rate=-1_550
        )
        assert resp.estimated_rate_display == pytest.approx(-0.00155)
        assert resp.mark_twap_display == pytest.approx(1.222131)
        assert resp.method == "INTERPOLATED"
