"""Value objects for the vAMM curve and spread model."""

from dataclasses import dataclass

from src.pm_market.domain.models import AMM


@dataclass(frozen=True)
class CurveReserves:
    """Minimal curve state a swap needs. Produced, never written back."""

    base_asset_reserve: int
    quote_asset_reserve: int
    sqrt_k: int
    peg_multiplier: int

    @property
    def invariant(self) -> int:
        return self.sqrt_k * self.sqrt_k

    @classmethod
    def from_amm(cls, amm: AMM) -> "CurveReserves":
        return cls(
            base_asset_reserve=amm.base_asset_reserve,
            quote_asset_reserve=amm.quote_asset_reserve,
            sqrt_k=amm.sqrt_k,
            peg_multiplier=amm.peg_multiplier,
        )


@dataclass(frozen=True)
class SpreadTerms:
    """Every intermediate of the directional spread computation.

    Spread values are floats because inventory and leverage scaling are
    float multiplications in the authoritative client math.
    """

    long_vol_spread: int
    short_vol_spread: int
    long_spread_w_ps: float  # after oracle/reserve price divergence
    short_spread_w_ps: float
    max_target_spread: int
    inventory_spread_scale: float
    long_spread_w_inv_scale: float
    short_spread_w_inv_scale: float
    effective_leverage: float
    effective_leverage_capped: float
    long_spread_w_el: float
    short_spread_w_el: float
    revenue_retreat_amount: float
    half_revenue_retreat_amount: float
    long_spread_w_rev_retreat: float
    short_spread_w_rev_retreat: float
    total_spread: float
    long_spread: float
    short_spread: float
