"""주문 상태 워크플로우.

기본 정책은 관리자가 어떤 상태로든 바꿀 수 있는 "허용" 모드다. strict 모드에서는
pending -> printing -> shipped -> delivered 흐름과 중간의 unaccepted / rejected 분기만 허용한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..errors import InvalidStateError, PermissionDeniedError, ValidationError
from ..ledger.engine import LedgerEngine
from ..models.order import Order, OrderStatus


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PRINTING, OrderStatus.UNACCEPTED, OrderStatus.REJECTED}
    ),
    OrderStatus.PRINTING: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.UNACCEPTED, OrderStatus.REJECTED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.UNACCEPTED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.UNACCEPTED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
}


@dataclass(slots=True, frozen=True)
class StatusChange:
    """상태 변경 결과. earnings_delta 는 다음 잔액 재계산에서 달라지는 양이다."""

    order: Order
    previous: OrderStatus
    current: OrderStatus
    earnings_delta: Decimal

    @property
    def changed(self) -> bool:
        return self.previous != self.current


def parse_status(value: str | OrderStatus) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"unknown order status: {value!r}") from exc


class OrderStatusWorkflow:
    def __init__(self, engine: LedgerEngine, *, strict_transitions: bool = False) -> None:
        self._engine = engine
        self._strict = strict_transitions

    def can_transition(self, current: OrderStatus, target: OrderStatus) -> bool:
        if current == target:
            return True
        if not self._strict:
            return True
        return target in ALLOWED_TRANSITIONS[current]

    def set_status(
        self,
        order: Order,
        new_status: str | OrderStatus,
        *,
        is_admin: bool,
        now: datetime,
        admin_comments: str | None = None,
    ) -> StatusChange:
        if not is_admin:
            raise PermissionDeniedError("only the admin can change order status")

        target = parse_status(new_status)
        previous = order.status

        if not self.can_transition(previous, target):
            raise InvalidStateError(
                f"cannot move order {order.order_id} from {previous} to {target}"
            )

        updates: dict[str, object] = {"status": target, "updated_at": now}
        if admin_comments is not None:
            updates["admin_comments"] = admin_comments
        updated = order.model_copy(update=updates)

        delta = self._engine.status_effect(target) - self._engine.status_effect(previous)
        return StatusChange(
            order=updated,
            previous=previous,
            current=target,
            earnings_delta=delta,
        )

    @staticmethod
    def update_comments(
        order: Order, comments: str, *, is_admin: bool, now: datetime
    ) -> Order:
        if not is_admin:
            raise PermissionDeniedError("only the admin can edit order comments")
        return order.model_copy(update={"admin_comments": comments, "updated_at": now})
