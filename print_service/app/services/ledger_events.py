"""정산 도메인 이벤트 발행.

쓰기가 성공한 뒤에 printdesk.ledger 토픽으로 이벤트를 보낸다. 발행 실패는 로그만 남기고
요청은 성공으로 처리한다 (잔액은 원본 도큐먼트에서 파생되므로 이벤트가 빠져도 틀리지 않는다).
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Protocol

from common.eventbus.config import is_publishing_enabled
from common.eventbus.core import Event
from common.eventbus.helpers import new_json_event
from common.eventbus.kafka import get_kafka_event_bus
from common.eventbus.topics import TOPIC_LEDGER
from common.events.ledger import (
    AdjustmentPostedEvent,
    LedgerEventType,
    OrderStatusChangedEvent,
    RedeemEvent,
)

from ..models.adjustment import ManualAdjustment
from ..models.order import Order, OrderStatus
from ..models.redeem import RedeemRequest


logger = logging.getLogger(__name__)

SOURCE = "print-service"
VERSION = "1.0"


class EventBusInterface(Protocol):
    def publish(self, topic: str, event: Event) -> None:  # pragma: no cover - Protocol
        ...


class LedgerEventPublisher:
    """도메인 이벤트를 Event 로 감싸 발행한다. bus 가 None 이면 아무것도 하지 않는다."""

    def __init__(self, bus: EventBusInterface | None) -> None:
        self._bus = bus

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _publish(self, payload: dict[str, Any], key: str) -> str | None:
        if self._bus is None:
            return None

        event_id = str(payload["id"])
        wrapped = new_json_event(payload=payload, key=key, event_id=event_id)
        try:
            self._bus.publish(TOPIC_LEDGER.base, wrapped)
        except Exception:  # noqa: BLE001
            logger.exception(
                "failed to publish ledger event type=%s id=%s",
                payload.get("type"),
                event_id,
                extra={"photographer_uid": key},
            )
            return None
        return event_id

    def order_placed(self, order: Order, changed_by: str | None) -> str | None:
        event = OrderStatusChangedEvent(
            id=str(uuid.uuid4()),
            type=LedgerEventType.ORDER_PLACED,
            timestamp=self._now(),
            source=SOURCE,
            version=VERSION,
            photographer_uid=order.photographer_uid,
            order_id=order.order_id,
            previous_status=None,
            status=str(order.status),
            earnings_delta="0",
            changed_by=changed_by,
        )
        return self._publish(asdict(event), order.photographer_uid)

    def order_status_changed(
        self,
        order: Order,
        previous: OrderStatus,
        earnings_delta: Decimal,
        changed_by: str | None,
    ) -> str | None:
        event = OrderStatusChangedEvent(
            id=str(uuid.uuid4()),
            type=LedgerEventType.ORDER_STATUS_CHANGED,
            timestamp=self._now(),
            source=SOURCE,
            version=VERSION,
            photographer_uid=order.photographer_uid,
            order_id=order.order_id,
            previous_status=str(previous),
            status=str(order.status),
            earnings_delta=str(earnings_delta),
            changed_by=changed_by,
        )
        return self._publish(asdict(event), order.photographer_uid)

    def adjustment_posted(self, adjustment: ManualAdjustment) -> str | None:
        event = AdjustmentPostedEvent(
            id=str(uuid.uuid4()),
            type=LedgerEventType.ADJUSTMENT_POSTED,
            timestamp=self._now(),
            source=SOURCE,
            version=VERSION,
            photographer_uid=adjustment.photographer_uid,
            adjustment_id=adjustment.id or "",
            amount=str(adjustment.amount),
            remarks=adjustment.remarks,
            admin_uid=adjustment.admin_uid,
        )
        return self._publish(asdict(event), adjustment.photographer_uid)

    def redeem_submitted(self, request: RedeemRequest) -> str | None:
        return self._publish_redeem(LedgerEventType.REDEEM_SUBMITTED, request)

    def redeem_resolved(self, request: RedeemRequest) -> str | None:
        return self._publish_redeem(LedgerEventType.REDEEM_RESOLVED, request)

    def _publish_redeem(self, event_type: str, request: RedeemRequest) -> str | None:
        event = RedeemEvent(
            id=str(uuid.uuid4()),
            type=event_type,
            timestamp=self._now(),
            source=SOURCE,
            version=VERSION,
            photographer_uid=request.photographer_uid,
            redeem_id=request.id or "",
            status=str(request.status),
            amount=str(request.amount),
            amount_paid=str(request.amount_paid),
            remarks=request.remarks or None,
        )
        return self._publish(asdict(event), request.photographer_uid)


def get_ledger_event_publisher() -> LedgerEventPublisher:
    """FastAPI DI용 퍼블리셔 팩토리. Kafka 설정이 없으면 발행하지 않는다."""

    if not is_publishing_enabled():
        return LedgerEventPublisher(None)
    return LedgerEventPublisher(get_kafka_event_bus())
