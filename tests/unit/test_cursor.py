from src.pm_common.enums import OrderSide
from src.pm_matching.domain.models import RestingOrder
from src.pm_matching.engine.cursor import OrderCursor


def _ro(order_id: str, owner: str = "u1", qty: int = 100, filled: int = 0) -> RestingOrder:
    return RestingOrder(
        order_id=order_id,
        owner=owner,
        side=OrderSide.ASK,
        base_asset_amount=qty,
        base_asset_amount_filled=filled,
        price=10_000_000,
    )


class TestOrderCursor:
    def test_peek_does_not_consume(self) -> None:
        cursor = OrderCursor([_ro("o1"), _ro("o2")])
        assert cursor.peek().order_id == "o1"
        assert cursor.peek().order_id == "o1"
        assert cursor.consumed == 0

    def test_advance_moves_to_next(self) -> None:
        cursor = OrderCursor([_ro("o1"), _ro("o2")])
        assert cursor.advance().order_id == "o1"
        assert cursor.peek().order_id == "o2"
        assert cursor.consumed == 1

    def test_exhausted(self) -> None:
        cursor = OrderCursor([_ro("o1")])
        assert not cursor.exhausted
        cursor.advance()
        assert cursor.exhausted
        assert cursor.advance() is None
        assert cursor.consumed == 1

    def test_empty(self) -> None:
        cursor = OrderCursor([])
        assert cursor.exhausted
        assert cursor.peek() is None

    def test_accepts_lazy_generator(self) -> None:
        cursor = OrderCursor(_ro(f"o{i}") for i in range(3))
        ids = []
        while not cursor.exhausted:
            ids.append(cursor.advance().order_id)
        assert ids == ["o0", "o1", "o2"]

    def test_skip_excluded_owner_without_consuming(self) -> None:
        cursor = OrderCursor([_ro("mine", owner="me"), _ro("theirs", owner="mm")])
        order = cursor.skip_while_unusable(frozenset({"me"}))
        assert order.order_id == "theirs"
        assert cursor.consumed == 0

    def test_skip_fully_filled(self) -> None:
        cursor = OrderCursor([_ro("done", qty=100, filled=100), _ro("live")])
        assert cursor.skip_while_unusable(frozenset()).order_id == "live"

    def test_skip_to_end(self) -> None:
        cursor = OrderCursor([_ro("mine", owner="me")])
        assert cursor.skip_while_unusable(frozenset({"me"})) is None
        assert cursor.exhausted
