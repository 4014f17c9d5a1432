"""정산 집계 결과 모델 (LedgerEngine 출력)."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field

from .adjustment import ManualAdjustment
from .order import Order
from .redeem import RedeemRequest


class OrderStats(BaseModel):
    total: int = 0
    progress: int = 0  # pending + printing + shipped
    delivered: int = 0
    unaccepted: int = 0
    rejected: int = 0


class EarningsSummary(BaseModel):
    """한 포토그래퍼의 파생 잔액.

    redeemable_earnings 는 음수가 될 수 있으며 0 으로 자르지 않는다.
    available_to_redeem 은 접수 대기 중인 요청 금액까지 뺀 값으로, 신규 정산 요청 한도다.
    """

    stats: OrderStats
    order_earnings: Decimal
    adjustment_earnings: Decimal
    gross_earnings: Decimal
    total_redeemed: Decimal
    redeemable_earnings: Decimal
    pending_redeem_total: Decimal
    available_to_redeem: Decimal


class LedgerEntryType(StrEnum):
    ORDER_EARNING = "order_earning"
    ORDER_PENALTY = "order_penalty"
    ADJUSTMENT = "adjustment"
    REDEEM_PAYOUT = "redeem_payout"


class LedgerTransaction(BaseModel):
    """명세서 한 줄."""

    type: LedgerEntryType
    amount: Decimal
    occurred_at: datetime
    reference_id: str | None = None  # order_id / adjustment id / redeem id
    description: str = ""
    running_balance: Decimal = Decimal("0")


class PhotographerEarnings(BaseModel):
    """관리자 포토그래퍼 목록용 잔액 요약."""

    uid: str
    photographer_id: str
    display_name: str
    email: str
    redeemable_earnings: Decimal
    delivered: int
    unaccepted: int


class DashboardStats(BaseModel):
    """관리자 대시보드 전체 집계."""

    total_orders: int
    delivered: int
    unaccepted: int
    rejected: int
    in_progress: int
    redeem_pending: int


class LedgerSnapshot(BaseModel):
    """한 시점에 일관되게 읽은 포토그래퍼의 정산 원본 데이터."""

    orders: list[Order] = Field(default_factory=list)
    adjustments: list[ManualAdjustment] = Field(default_factory=list)
    redeems: list[RedeemRequest] = Field(default_factory=list)
