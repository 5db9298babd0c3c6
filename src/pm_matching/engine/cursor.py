from collections.abc import Iterable, Iterator

from src.pm_matching.domain.models import RestingOrder


class OrderCursor:
    """Pull-based cursor over price-sorted resting orders with one-order lookahead.

    The merge walk must see the next order's price before deciding whether
    the curve or the book supplies the next unit, so peek() never consumes.
    Accepts any iterable, including lazy generators.
    """

    def __init__(self, orders: Iterable[RestingOrder]) -> None:
        self._it: Iterator[RestingOrder] = iter(orders)
        self._current: RestingOrder | None = next(self._it, None)
        self.consumed = 0

    def peek(self) -> RestingOrder | None:
        return self._current

    def advance(self) -> RestingOrder | None:
        """Consume the current order and return it."""
        order = self._current
        if order is not None:
            self._current = next(self._it, None)
            self.consumed += 1
        return order

    @property
    def exhausted(self) -> bool:
        return self._current is None

    def skip_while_unusable(self, excluded_owners: frozenset[str]) -> RestingOrder | None:
        """Advance past excluded owners and empty orders; return the next usable one."""
        while self._current is not None and (
            self._current.owner in excluded_owners or self._current.remaining <= 0
        ):
            self._current = next(self._it, None)
        return self._current
