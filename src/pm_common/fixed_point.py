"""Fixed-point integer arithmetic for the perp simulation engine.

All prices, reserves, amounts and rates are int at a named precision.
No Decimal. Floats appear only where the authoritative client math uses them
(spread scaling) and in display conversion.

Division semantics: the authoritative engine truncates toward zero. Python's
`//` floors, which differs for negative operands, so any expression that can
go negative uses div_trunc.
"""

import math

from src.pm_common.errors import NegativeAmountError

# --- Precision scales ---

PRICE_PRECISION = 10**6
PEG_PRECISION = 10**6
QUOTE_PRECISION = 10**6
AMM_RESERVE_PRECISION = 10**9
BASE_PRECISION = AMM_RESERVE_PRECISION
FUNDING_RATE_BUFFER_PRECISION = 10**3
FUNDING_RATE_PRECISION = PRICE_PRECISION * FUNDING_RATE_BUFFER_PRECISION
PERCENTAGE_PRECISION = 10**6
BID_ASK_SPREAD_PRECISION = 10**6
MARGIN_PRECISION = 10**4

# --- Scale ratios ---

AMM_TO_QUOTE_PRECISION_RATIO = AMM_RESERVE_PRECISION // QUOTE_PRECISION  # 10^3
PRICE_DIV_PEG = PRICE_PRECISION // PEG_PRECISION  # 1
AMM_TIMES_PEG_TO_QUOTE_PRECISION_RATIO = (
    AMM_RESERVE_PRECISION * PEG_PRECISION // QUOTE_PRECISION
)  # 10^9
PRICE_TO_QUOTE_PRECISION_RATIO = PRICE_PRECISION // QUOTE_PRECISION  # 1

# --- Legacy scales (historical snapshots and reference trades) ---

LEGACY_MARK_PRICE_PRECISION = 10**10  # a.k.a. AMM mantissa
LEGACY_PEG_PRECISION = 10**3
LEGACY_AMM_RESERVE_PRECISION = 10**13

# --- Time (seconds) ---

FIVE_MINUTE = 300
ONE_HOUR = 3600
ONE_YEAR = 31_536_000

DEFAULT_REVENUE_SINCE_LAST_FUNDING_SPREAD_RETREAT = -25 * QUOTE_PRECISION


def div_trunc(a: int, b: int) -> int:
    """Integer division rounding toward zero: -7 / 2 -> -3 (not -4)."""
    if b == 0:
        raise ZeroDivisionError("div_trunc by zero")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def div_ceil(a: int, b: int) -> int:
    """Ceiling division for non-negative operands: (a + b - 1) // b."""
    return (a + b - 1) // b


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


def square_root(value: int) -> int:
    """Floor integer square root."""
    validate_non_negative("square_root input", value)
    return math.isqrt(value)


def validate_non_negative(name: str, value: int) -> None:
    """Raise NegativeAmountError if value < 0."""
    if value < 0:
        raise NegativeAmountError(name, value)


def convert_to_number(value: int | None, precision: int = PRICE_PRECISION) -> float:
    """Convert a fixed-point int to float for display: 1_500_000 -> 1.5."""
    if not value:
        return 0.0
    whole = div_trunc(value, precision)
    return whole + (value - whole * precision) / precision


def calculate_fee(trade_value: int, fee_rate_bps: int) -> int:
    """Calculate taker fee with ceiling division (venue never under-charges).

    fee = ceil(trade_value * fee_rate_bps / 10000)
    """
    if trade_value == 0 or fee_rate_bps == 0:
        return 0
    return div_ceil(trade_value * fee_rate_bps, 10000)


def calculate_trade_amount(collateral: int, leverage: int, fee_rate_bps: int) -> int:
    """Quote notional for collateral at leverage, net of the fee it must cover.

    notional = collateral * leverage * (1 - leverage * fee_rate)
    e.g. 10 USDC at 5x with 10 bps -> 49.75 USDC
    """
    return collateral * leverage * (10000 - leverage * fee_rate_bps) // 10000
