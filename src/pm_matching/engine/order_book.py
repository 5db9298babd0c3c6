from dataclasses import dataclass, field

from src.pm_common.enums import OrderSide
from src.pm_market.domain.models import OraclePriceData
from src.pm_matching.domain.models import RestingOrder


@dataclass
class OrderBook:
    """Resting limit orders for one perp market.

    Floating (oracle-offset) orders have no fixed price, so sides are sorted
    on demand against the oracle sample rather than kept in price buckets.
    """

    market_index: int
    _order_index: dict[str, RestingOrder] = field(default_factory=dict)

    def add_order(self, order: RestingOrder) -> None:
        self._order_index[order.order_id] = order

    def cancel_order(self, order_id: str) -> None:
        self._order_index.pop(order_id, None)

    def __len__(self) -> int:
        return len(self._order_index)

    def limit_bids(self, oracle: OraclePriceData) -> list[RestingOrder]:
        """Open bids, best (highest) price first, then oldest slot."""
        bids = [o for o in self._order_index.values() if o.side == OrderSide.BID and o.remaining > 0]
        return sorted(bids, key=lambda o: (-o.get_price(oracle), o.slot))

    def limit_asks(self, oracle: OraclePriceData) -> list[RestingOrder]:
        """Open asks, best (lowest) price first, then oldest slot."""
        asks = [o for o in self._order_index.values() if o.side == OrderSide.ASK and o.remaining > 0]
        return sorted(asks, key=lambda o: (o.get_price(oracle), o.slot))

    def best_bid(self, oracle: OraclePriceData) -> int | None:
        bids = self.limit_bids(oracle)
        return bids[0].get_price(oracle) if bids else None

    def best_ask(self, oracle: OraclePriceData) -> int | None:
        asks = self.limit_asks(oracle)
        return asks[0].get_price(oracle) if asks else None
