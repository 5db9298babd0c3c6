"""Internal consistency checks for curve and spread math.

A failed check means the engine computed a wrong number; it raises
InvariantViolationError and is never recovered from.
"""

import logging

from src.pm_common.errors import InvariantViolationError

logger = logging.getLogger(__name__)


def verify_swap_invariant(new_reserve_in: int, new_reserve_out: int, invariant: int) -> None:
    """INV-SWAP: new_in * new_out == invariant up to floor-division residue.

    new_out = invariant // new_in, so 0 <= invariant - new_in * new_out < new_in.
    """
    residue = invariant - new_reserve_in * new_reserve_out
    if not 0 <= residue < new_reserve_in:
        raise InvariantViolationError(
            f"INV-SWAP violated: {new_reserve_in} * {new_reserve_out} "
            f"leaves residue {residue} against invariant {invariant}"
        )
    logger.debug("Swap invariant OK: in=%d out=%d residue=%d", new_reserve_in, new_reserve_out, residue)


def verify_spread_bounds(long_spread: float, short_spread: float, max_target_spread: int) -> None:
    """INV-SPREAD: both sides non-negative and their sum within the max target."""
    if long_spread < 0 or short_spread < 0:
        raise InvariantViolationError(
            f"INV-SPREAD violated: negative spread long={long_spread} short={short_spread}"
        )
    if long_spread + short_spread > max_target_spread:
        raise InvariantViolationError(
            f"INV-SPREAD violated: long({long_spread}) + short({short_spread}) "
            f"> max_target_spread={max_target_spread}"
        )


def verify_target_price_monotonic(
    tp1: int, tp2: int, original_diff: int, tolerance: int
) -> None:
    """INV-TARGET: the solved price moves toward the target without overshooting."""
    if tp1 - tp2 > original_diff:
        raise InvariantViolationError(
            f"INV-TARGET violated: gap {tp1 - tp2} exceeds original gap {original_diff}"
        )
    if tp2 > tp1 and tp2 - tp1 >= tolerance:
        raise InvariantViolationError(
            f"INV-TARGET violated: {tp2} >= {tp1}, err {tp2 - tp1}"
        )
