"""정산(earnings) 관련 도메인 이벤트 정의.

금액은 JSON 에서 정밀도를 잃지 않도록 문자열(Decimal 표기)로 주고받는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Self


class LedgerEventType:
    """정산 이벤트 타입 상수."""

    ORDER_PLACED = "order.placed"
    ORDER_STATUS_CHANGED = "order.status_changed"
    ADJUSTMENT_POSTED = "adjustment.posted"
    REDEEM_SUBMITTED = "redeem.submitted"
    REDEEM_RESOLVED = "redeem.resolved"


@dataclass(slots=True)
class OrderStatusChangedEvent:
    """주문 생성/상태 변경 이벤트.

    주문 생성 시에는 previous_status 가 None 이다.
    earnings_delta 는 이 변경으로 파생 잔액이 달라지는 양이다.
    """

    id: str
    type: str
    timestamp: str
    source: str
    version: str
    photographer_uid: str
    order_id: str
    previous_status: str | None
    status: str
    earnings_delta: str
    changed_by: str | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            timestamp=str(data["timestamp"]),
            source=str(data["source"]),
            version=str(data.get("version", "1.0")),
            photographer_uid=str(data["photographer_uid"]),
            order_id=str(data["order_id"]),
            previous_status=data.get("previous_status"),
            status=str(data["status"]),
            earnings_delta=str(Decimal(str(data.get("earnings_delta", "0")))),
            changed_by=data.get("changed_by"),
        )


@dataclass(slots=True)
class AdjustmentPostedEvent:
    """관리자 수동 조정 이벤트."""

    id: str
    type: str
    timestamp: str
    source: str
    version: str
    photographer_uid: str
    adjustment_id: str
    amount: str
    remarks: str
    admin_uid: str | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            timestamp=str(data["timestamp"]),
            source=str(data["source"]),
            version=str(data.get("version", "1.0")),
            photographer_uid=str(data["photographer_uid"]),
            adjustment_id=str(data["adjustment_id"]),
            amount=str(Decimal(str(data["amount"]))),
            remarks=str(data.get("remarks", "")),
            admin_uid=data.get("admin_uid"),
        )


@dataclass(slots=True)
class RedeemEvent:
    """정산 요청 접수/처리 이벤트.

    접수(redeem.submitted) 시 amount_paid 는 "0" 이다.
    """

    id: str
    type: str
    timestamp: str
    source: str
    version: str
    photographer_uid: str
    redeem_id: str
    status: str
    amount: str
    amount_paid: str
    remarks: str | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            timestamp=str(data["timestamp"]),
            source=str(data["source"]),
            version=str(data.get("version", "1.0")),
            photographer_uid=str(data["photographer_uid"]),
            redeem_id=str(data["redeem_id"]),
            status=str(data["status"]),
            amount=str(Decimal(str(data["amount"]))),
            amount_paid=str(Decimal(str(data.get("amount_paid", "0")))),
            remarks=data.get("remarks"),
        )
