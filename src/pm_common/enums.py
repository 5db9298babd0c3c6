"""Global enums shared by the simulation modules."""

from enum import Enum


class MarketStatus(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZED = "INITIALIZED"
    ACTIVE = "ACTIVE"
    REDUCE_ONLY = "REDUCE_ONLY"
    SETTLEMENT = "SETTLEMENT"
    DELISTED = "DELISTED"


class ContractTier(str, Enum):
    """Risk tier: bounds how far the funding TWAP spread may diverge."""
    A = "A"
    B = "B"
    C = "C"
    SPECULATIVE = "SPECULATIVE"
    ISOLATED = "ISOLATED"


class PositionDirection(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class SwapDirection(str, Enum):
    """AMM-side view of a trade: ADD deposits into the curve, REMOVE withdraws."""
    ADD = "ADD"
    REMOVE = "REMOVE"


class OrderSide(str, Enum):
    BID = "BID"
    ASK = "ASK"


class LiquiditySource(str, Enum):
    """Where an L2 level's size comes from."""
    VAMM = "VAMM"
    DLOB = "DLOB"


class FundingEstimateMethod(str, Enum):
    INTERPOLATED = "INTERPOLATED"
    LOWERBOUND = "LOWERBOUND"
    CAPPED = "CAPPED"
