"""MarketSimulationService: thin composition layer over the numeric core.

The only place configured defaults are read. Every value is passed to the
engine functions explicitly, so the core stays free of ambient config.
All methods are pure reads of caller-owned snapshots.
"""

import logging

from config.settings import Settings, settings as default_settings
from src.pm_amm.engine.curve import QUOTE, AssetType, QuoteDenominated
from src.pm_common.enums import FundingEstimateMethod, PositionDirection
from src.pm_common.errors import InsufficientLiquidityError
from src.pm_common.fixed_point import calculate_fee
from src.pm_funding.engine.estimator import (
    calculate_all_estimated_funding_rate,
    calculate_estimated_funding_rate,
    calculate_long_short_funding_rate_and_live_twaps,
)
from src.pm_market.application.schemas import (
    EntryPriceResponse,
    FundingRateResponse,
    L2SnapshotResponse,
    TargetPriceTradeResponse,
)
from src.pm_market.domain.models import OraclePriceData, PerpMarket
from src.pm_matching.engine.entry_price import calculate_estimated_entry_price
from src.pm_matching.engine.l2 import get_l2_snapshot
from src.pm_matching.engine.order_book import OrderBook
from src.pm_trade.engine.target_price import MAX_PCT, calculate_target_price_trade

logger = logging.getLogger(__name__)


class MarketSimulationService:
    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or default_settings

    def preview_trade(
        self,
        market: PerpMarket,
        oracle: OraclePriceData,
        order_book: OrderBook,
        direction: PositionDirection,
        amount: int,
        now: int,
        asset_type: AssetType = QUOTE,
        excluded_owners: frozenset[str] = frozenset(),
    ) -> EntryPriceResponse:
        """Estimate entry price and taker fee for a market order.

        Raises InsufficientLiquidityError unless ALLOW_PARTIAL_FILLS is set.
        """
        # long takers lift asks, short takers hit bids
        if direction == PositionDirection.LONG:
            orders = order_book.limit_asks(oracle)
        else:
            orders = order_book.limit_bids(oracle)

        try:
            estimate = calculate_estimated_entry_price(
                asset_type,
                amount,
                direction,
                market,
                oracle,
                orders,
                now,
                excluded_owners=excluded_owners,
                allow_partial=self._settings.ALLOW_PARTIAL_FILLS,
            )
        except InsufficientLiquidityError as e:
            logger.info(
                "Trade preview rejected market=%d %s: requested=%d filled=%d",
                market.market_index,
                direction.value,
                e.requested,
                e.filled,
            )
            raise

        if isinstance(asset_type, QuoteDenominated):
            filled = estimate.quote_filled
        else:
            filled = estimate.base_filled
        fee = calculate_fee(estimate.quote_filled, self._settings.TAKER_FEE_BPS)
        logger.info(
            "Trade preview market=%d %s amount=%d entry=%d impact=%d fee=%d",
            market.market_index,
            direction.value,
            amount,
            estimate.entry_price,
            estimate.price_impact,
            fee,
        )
        return EntryPriceResponse.from_domain(
            market.market_index,
            direction.value,
            estimate,
            fee=fee,
            fully_filled=filled == amount,
        )

    def get_l2(
        self,
        market: PerpMarket,
        oracle: OraclePriceData,
        order_book: OrderBook,
        now: int,
        depth: int | None = None,
        include_vamm: bool = True,
    ) -> L2SnapshotResponse:
        snapshot = get_l2_snapshot(
            market,
            oracle,
            order_book,
            now,
            depth=depth or self._settings.L2_DEPTH,
            num_vamm_orders=self._settings.VAMM_L2_NUM_ORDERS,
            top_of_book_quote_amounts=self._settings.VAMM_TOP_OF_BOOK_QUOTE_AMOUNTS,
            include_vamm=include_vamm,
        )
        return L2SnapshotResponse.from_domain(market.market_index, snapshot)

    def get_funding_rate(
        self,
        market: PerpMarket,
        oracle: OraclePriceData,
        now: int,
        mark_price: int | None = None,
        period_adjustment: int = 1,
        method: FundingEstimateMethod | None = None,
    ) -> FundingRateResponse:
        method = method or self._settings.FUNDING_ESTIMATE_METHOD
        estimate = calculate_all_estimated_funding_rate(market, oracle, now, mark_price)
        estimated_rate = calculate_estimated_funding_rate(
            market, oracle, now, mark_price, period_adjustment, method
        )
        rates = calculate_long_short_funding_rate_and_live_twaps(market, oracle, now, mark_price)
        return FundingRateResponse.from_domain(
            market.market_index,
            method.value,
            estimated_rate,
            estimate,
            long_rate=rates.long_rate,
            short_rate=rates.short_rate,
        )

    def get_target_price_trade(
        self,
        market: PerpMarket,
        target_price: int,
        oracle: OraclePriceData,
        now: int,
        pct: int = MAX_PCT,
        output_base: bool = False,
    ) -> TargetPriceTradeResponse:
        trade = calculate_target_price_trade(
            market, target_price, oracle, now, pct=pct, output_base=output_base
        )
        return TargetPriceTradeResponse.from_domain(market.market_index, trade)
