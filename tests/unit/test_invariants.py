import pytest

from src.pm_amm.domain.invariants import (
    verify_spread_bounds,
    verify_swap_invariant,
    verify_target_price_monotonic,
)
from src.pm_common.errors import InvariantViolationError


class TestSwapInvariant:
    def test_exact_product_passes(self) -> None:
        verify_swap_invariant(100, 100, 10_000)  # no exception

    def test_floor_residue_passes(self) -> None:
        # 10_000 // 101 == 99, residue 1 < 101
        verify_swap_invariant(101, 99, 10_000)

    def test_product_above_invariant_raises(self) -> None:
        with pytest.raises(InvariantViolationError, match=r"INV-SWAP"):
            verify_swap_invariant(101, 100, 10_000)

    def test_residue_too_large_raises(self) -> None:
        with pytest.raises(InvariantViolationError, match=r"INV-SWAP"):
            verify_swap_invariant(101, 98, 10_000)


class TestSpreadBounds:
    def test_within_bounds(self) -> None:
        verify_spread_bounds(100, 200, 300)

    def test_negative_side_raises(self) -> None:
        with pytest.raises(InvariantViolationError, match=r"INV-SPREAD"):
            verify_spread_bounds(-1, 200, 300)

    def test_sum_over_max_raises(self) -> None:
        with pytest.raises(InvariantViolationError, match=r"INV-SPREAD"):
            verify_spread_bounds(200, 200, 300)


class TestTargetPriceMonotonic:
    def test_within_tolerance(self) -> None:
        verify_target_price_monotonic(10_500_000, 10_499_999, 500_000, 100_000)

    def test_overshoot_beyond_original_gap_raises(self) -> None:
        with pytest.raises(InvariantViolationError, match=r"INV-TARGET"):
            verify_target_price_monotonic(10_500_000, 9_000_000, 500_000, 100_000)

    def test_wrong_side_beyond_tolerance_raises(self) -> None:
        with pytest.raises(InvariantViolationError, match=r"INV-TARGET"):
            verify_target_price_monotonic(10_000_000, 10_200_000, 500_000, 100_000)
