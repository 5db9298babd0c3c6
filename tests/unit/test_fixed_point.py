"""Tests for pm_common.fixed_point: rounding helpers and the reference trade."""

import pytest

from src.pm_amm.engine.curve import QuoteDenominated
from src.pm_common.enums import PositionDirection
from src.pm_common.errors import NegativeAmountError
from src.pm_common.fixed_point import (
    LEGACY_MARK_PRICE_PRECISION,
    LEGACY_PEG_PRECISION,
    calculate_fee,
    calculate_trade_amount,
    clamp,
    convert_to_number,
    div_ceil,
    div_trunc,
    square_root,
    validate_non_negative,
)
from src.pm_market.domain.models import AMM, OraclePriceData, PerpMarket
from src.pm_trade.engine.slippage import calculate_trade_acquired_amounts


class TestDivTrunc:
    def test_positive(self) -> None:
        assert div_trunc(7, 2) == 3

    def test_negative_rounds_toward_zero(self) -> None:
        assert div_trunc(-7, 2) == -3
        assert div_trunc(7, -2) == -3
        assert div_trunc(-7, -2) == 3

    def test_differs_from_floor_division(self) -> None:
        assert -7 // 2 == -4
        assert div_trunc(-7, 2) != -7 // 2

    def test_zero_divisor_raises(self) -> None:
        with pytest.raises(ZeroDivisionError):
            div_trunc(1, 0)


class TestHelpers:
    def test_div_ceil(self) -> None:
        assert div_ceil(10, 3) == 4
        assert div_ceil(9, 3) == 3

    def test_clamp(self) -> None:
        assert clamp(5, 0, 3) == 3
        assert clamp(-5, 0, 3) == 0
        assert clamp(2, 0, 3) == 2

    def test_square_root_floor(self) -> None:
        assert square_root(15) == 3
        assert square_root(16) == 4
        assert square_root(10**36) == 10**18

    def test_square_root_negative_raises(self) -> None:
        with pytest.raises(NegativeAmountError):
            square_root(-1)

    def test_validate_non_negative(self) -> None:
        validate_non_negative("amount", 0)
        with pytest.raises(NegativeAmountError):
            validate_non_negative("amount", -1)


class TestConvertToNumber:
    def test_basic(self) -> None:
        assert convert_to_number(1_500_000) == 1.5

    def test_negative_keeps_sign_on_both_parts(self) -> None:
        assert convert_to_number(-1_500_000) == -1.5

    def test_none_and_zero(self) -> None:
        assert convert_to_number(None) == 0.0
        assert convert_to_number(0) == 0.0

    def test_custom_precision(self) -> None:
        assert convert_to_number(2_500_000_000, 10**9) == 2.5


class TestFees:
    def test_fee_rounds_up(self) -> None:
        assert calculate_fee(1, 10) == 1
        assert calculate_fee(10_000, 10) == 10

    def test_zero_inputs(self) -> None:
        assert calculate_fee(0, 10) == 0
        assert calculate_fee(10_000, 0) == 0

    def test_trade_amount_nets_fee(self) -> None:
        # 10 USDC at 5x with 10 bps -> 49.75 USDC notional
        assert calculate_trade_amount(10_000_000, 5, 10) == 49_750_000


class TestReferenceTrade:
    """Known reference: legacy 10^10 mantissa curve with 5 * 10^18 reserves, peg 1."""

    def _legacy_market(self) -> PerpMarket:
        reserve = 5 * 10**18
        amm = AMM(
            base_asset_reserve=reserve,
            quote_asset_reserve=reserve,
            sqrt_k=reserve,
            peg_multiplier=LEGACY_PEG_PRECISION,
        )
        return PerpMarket(market_index=0, amm=amm)

    def test_base_acquired_matches_reference(self) -> None:
        amount = calculate_trade_amount(10_000_000, 5, 10)
        acquired = calculate_trade_acquired_amounts(
            PositionDirection.LONG,
            amount,
            self._legacy_market(),
            OraclePriceData(price=1_000_000),
            now=0,
            asset_type=QuoteDenominated(reserve_scale=LEGACY_MARK_PRICE_PRECISION),
        )
        assert acquired.base_asset_amount == 497_450_503_674_885

    def test_fee_matches_reference(self) -> None:
        amount = calculate_trade_amount(10_000_000, 5, 10)
        assert calculate_fee(amount, 10) == 49_750
