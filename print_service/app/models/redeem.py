"""정산(redeem) 요청 도메인 모델."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel


class RedeemStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"


class RedeemRequest(BaseModel):
    """포토그래퍼가 낸 정산 요청.

    pending 에서 paid / rejected 로 한 번만 전이하며, 이후에는 종결 상태다.
    amount_paid 는 paid 일 때만 0 이 아니다.
    """

    id: str | None = None
    photographer_uid: str
    photographer_id: str
    photographer_name: str = ""
    amount: Decimal
    status: RedeemStatus = RedeemStatus.PENDING
    amount_paid: Decimal = Decimal("0")
    remarks: str = ""
    requested_at: datetime
    processed_at: datetime | None = None
    processed_by: str | None = None
    idempotency_key: str | None = None
    resolution_key: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status != RedeemStatus.PENDING
