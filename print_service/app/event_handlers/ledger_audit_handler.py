"""정산 이벤트 감사 로그 컨슈머.

printdesk.ledger 토픽의 이벤트를 ledger_audit 컬렉션에 한 건씩 쌓는다. 잔액 계산에는 쓰지 않으며,
"누가 언제 무엇을 바꿨는지"를 추적하기 위한 append-only 기록이다.
"""

from __future__ import annotations

import logging
import signal
from datetime import datetime, timezone
from typing import Any, List

from common.eventbus.config import get_brokers, get_group_id
from common.eventbus.core import Event
from common.eventbus.kafka import KafkaEventBus
from common.eventbus.topics import TOPIC_LEDGER
from common.events.ledger import (
    AdjustmentPostedEvent,
    LedgerEventType,
    OrderStatusChangedEvent,
    RedeemEvent,
)
from common.logger import setup_logger
from common.mongo.client import get_database

from ..repositories.audit_repository import AuditRepository
from ..repositories.interfaces import AuditRepositoryInterface


logger = logging.getLogger(__name__)


_DECODERS = {
    LedgerEventType.ORDER_PLACED: OrderStatusChangedEvent.from_dict,
    LedgerEventType.ORDER_STATUS_CHANGED: OrderStatusChangedEvent.from_dict,
    LedgerEventType.ADJUSTMENT_POSTED: AdjustmentPostedEvent.from_dict,
    LedgerEventType.REDEEM_SUBMITTED: RedeemEvent.from_dict,
    LedgerEventType.REDEEM_RESOLVED: RedeemEvent.from_dict,
}


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.warning("invalid event timestamp %r, using receive time", value)
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def build_audit_entry(payload: dict[str, Any]) -> dict[str, Any] | None:
    """이벤트 payload 를 감사 로그 도큐먼트로 바꾼다. 모르는 타입이면 None."""

    event_type = str(payload.get("type", ""))
    decoder = _DECODERS.get(event_type)
    if decoder is None:
        return None

    event = decoder(payload)
    return {
        "event_id": event.id,
        "type": event.type,
        "source": event.source,
        "photographer_uid": event.photographer_uid,
        "occurred_at": _parse_timestamp(event.timestamp),
        "recorded_at": datetime.now(timezone.utc),
        "payload": dict(payload),
    }


def _handle_event(evt: Event, *, repo: AuditRepositoryInterface) -> None:
    payload = evt.payload
    if not isinstance(payload, dict):
        logger.error("unexpected payload type for event %s: %r", evt.id, type(payload))
        return

    try:
        entry = build_audit_entry(payload)
    except Exception:  # noqa: BLE001
        logger.exception(
            "failed to decode ledger event id=%s payload=%r", payload.get("id"), payload
        )
        raise

    if entry is None:
        logger.debug(
            "ignoring unknown ledger event type=%s id=%s", payload.get("type"), evt.id
        )
        return

    if repo.append(entry):
        logger.info(
            "recorded ledger event type=%s id=%s",
            entry["type"],
            entry["event_id"],
            extra={"photographer_uid": entry["photographer_uid"]},
        )
    else:
        logger.debug("duplicate ledger event id=%s skipped", entry["event_id"])


def run_ledger_audit_consumer(stop_flag: List[bool]) -> None:
    """ledger 이벤트를 계속 소비하는 구독 루프. stop_flag[0] 이 True 가 되면 종료한다."""

    logger.info("ledger-audit-consumer starting up")

    repo = AuditRepository(get_database())
    brokers = get_brokers()
    group_id = get_group_id() + "-ledger-audit"

    bus = KafkaEventBus(brokers)

    try:
        logger.info("subscribing to topic=%s group_id=%s", TOPIC_LEDGER.base, group_id)
        bus.subscribe(
            group_id=group_id,
            topic=TOPIC_LEDGER,
            handler=lambda evt: _handle_event(evt, repo=repo),
            stop_flag=stop_flag,
        )
    finally:
        bus.close()
        logger.info("ledger-audit-consumer stopped")


def main() -> None:
    """단독 프로세스로 실행할 때 사용하는 엔트리 포인트."""

    setup_logger(name="ledger-audit-consumer")

    stop_flag: List[bool] = [False]

    def _signal_handler(signum, frame) -> None:  # type: ignore[unused-argument]
        logger.info("received signal %s, shutting down ledger-audit-consumer...", signum)
        stop_flag[0] = True

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    run_ledger_audit_consumer(stop_flag)


if __name__ == "__main__":  # pragma: no cover
    main()
