"""정산 계산 엔진.

포토그래퍼 한 명의 주문/수동 조정/정산 요청 목록으로부터 주문 통계, 잔액, 명세서를
계산한다. I/O 가 없는 순수 함수 모음이며, 같은 입력에 대해 항상 같은 결과를 낸다.

잔액은 "현재 상태"에서 파생된다. 주문이 delivered 에서 다른 상태로 바뀌면 다음 계산부터
그 주문의 수익이 사라진다 (별도의 확정 원장이 없다). 상태 변경 이력은 ledger_audit
컬렉션에 따로 쌓이지만 잔액 계산에는 쓰이지 않는다.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from ..config import EarningsConfig
from ..models.adjustment import ManualAdjustment
from ..models.earnings import (
    EarningsSummary,
    LedgerEntryType,
    LedgerTransaction,
    OrderStats,
)
from ..models.order import IN_PROGRESS_STATUSES, Order, OrderStatus
from ..models.redeem import RedeemRequest, RedeemStatus


ZERO = Decimal("0")


def _amount(value: Decimal | int | float | None) -> Decimal:
    # 누락된 금액은 0 으로 본다.
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class LedgerEngine:
    """정산 계산기. 금액 상수는 EarningsConfig 로 주입받는다.

    입력은 모두 같은 포토그래퍼의 데이터여야 한다 (photographer_uid 필터링은 호출자 책임).
    """

    def __init__(self, config: EarningsConfig) -> None:
        self._config = config

    @property
    def config(self) -> EarningsConfig:
        return self._config

    # 주문 ---------------------------------------------------------------------

    def order_stats(self, orders: Iterable[Order]) -> OrderStats:
        stats = OrderStats()
        for order in orders:
            stats.total += 1
            if order.status in IN_PROGRESS_STATUSES:
                stats.progress += 1
            elif order.status == OrderStatus.DELIVERED:
                stats.delivered += 1
            elif order.status == OrderStatus.UNACCEPTED:
                stats.unaccepted += 1
            elif order.status == OrderStatus.REJECTED:
                stats.rejected += 1
        return stats

    def order_earnings(self, delivered: int, unaccepted: int) -> Decimal:
        """delivered * 주문당 수익 - unaccepted * 미수락 패널티. 음수일 수 있다."""
        return (
            delivered * self._config.earning_per_order
            - unaccepted * self._config.penalty_per_unaccepted
        )

    def status_effect(self, status: OrderStatus) -> Decimal:
        """주문 하나가 현재 상태로 잔액에 기여하는 금액."""
        if status == OrderStatus.DELIVERED:
            return self._config.earning_per_order
        if status == OrderStatus.UNACCEPTED:
            return -self._config.penalty_per_unaccepted
        return ZERO

    # 조정 / 정산 -----------------------------------------------------------------

    @staticmethod
    def adjustment_earnings(adjustments: Iterable[ManualAdjustment]) -> Decimal:
        return sum((_amount(adj.amount) for adj in adjustments), ZERO)

    @staticmethod
    def total_redeemed(redeems: Iterable[RedeemRequest]) -> Decimal:
        # pending / rejected 요청은 잔액에 영향을 주지 않는다.
        return sum(
            (
                _amount(req.amount_paid)
                for req in redeems
                if req.status == RedeemStatus.PAID
            ),
            ZERO,
        )

    @staticmethod
    def pending_redeem_total(redeems: Iterable[RedeemRequest]) -> Decimal:
        return sum(
            (
                _amount(req.amount)
                for req in redeems
                if req.status == RedeemStatus.PENDING
            ),
            ZERO,
        )

    # 집계 ---------------------------------------------------------------------

    def summarize(
        self,
        orders: Sequence[Order],
        adjustments: Sequence[ManualAdjustment] = (),
        redeems: Sequence[RedeemRequest] = (),
    ) -> EarningsSummary:
        stats = self.order_stats(orders)
        order_earnings = self.order_earnings(stats.delivered, stats.unaccepted)
        adjustment_earnings = self.adjustment_earnings(adjustments)
        gross_earnings = order_earnings + adjustment_earnings
        total_redeemed = self.total_redeemed(redeems)
        redeemable_earnings = gross_earnings - total_redeemed
        pending_total = self.pending_redeem_total(redeems)

        return EarningsSummary(
            stats=stats,
            order_earnings=order_earnings,
            adjustment_earnings=adjustment_earnings,
            gross_earnings=gross_earnings,
            total_redeemed=total_redeemed,
            redeemable_earnings=redeemable_earnings,
            pending_redeem_total=pending_total,
            available_to_redeem=redeemable_earnings - pending_total,
        )

    def statement(
        self,
        orders: Sequence[Order],
        adjustments: Sequence[ManualAdjustment] = (),
        redeems: Sequence[RedeemRequest] = (),
    ) -> list[LedgerTransaction]:
        """명세서용 거래 목록 (최신순).

        같은 시각의 항목은 입력 순서(주문 -> 조정 -> 정산)를 유지한다. 동률 순서는
        안정 정렬의 부산물일 뿐 보장하는 계약은 아니다.
        running_balance 는 가장 오래된 항목부터 누적한 값이라, 맨 위 항목의 값이
        redeemable_earnings 와 같다.
        """

        entries: list[LedgerTransaction] = []

        for order in orders:
            if order.status == OrderStatus.DELIVERED:
                entries.append(
                    LedgerTransaction(
                        type=LedgerEntryType.ORDER_EARNING,
                        amount=self._config.earning_per_order,
                        occurred_at=_as_utc(order.created_at),
                        reference_id=order.order_id,
                        description=f"Order {order.order_id} delivered",
                    )
                )
            elif order.status == OrderStatus.UNACCEPTED:
                entries.append(
                    LedgerTransaction(
                        type=LedgerEntryType.ORDER_PENALTY,
                        amount=-self._config.penalty_per_unaccepted,
                        occurred_at=_as_utc(order.created_at),
                        reference_id=order.order_id,
                        description=f"Order {order.order_id} unaccepted",
                    )
                )

        for adj in adjustments:
            entries.append(
                LedgerTransaction(
                    type=LedgerEntryType.ADJUSTMENT,
                    amount=_amount(adj.amount),
                    occurred_at=_as_utc(adj.created_at),
                    reference_id=adj.id,
                    description=adj.remarks,
                )
            )

        for req in redeems:
            if req.status != RedeemStatus.PAID:
                continue
            entries.append(
                LedgerTransaction(
                    type=LedgerEntryType.REDEEM_PAYOUT,
                    amount=-_amount(req.amount_paid),
                    occurred_at=_as_utc(req.processed_at or req.requested_at),
                    reference_id=req.id,
                    description=req.remarks or "Redeem payout",
                )
            )

        entries.sort(key=lambda entry: entry.occurred_at, reverse=True)

        balance = ZERO
        for entry in reversed(entries):
            balance += entry.amount
            entry.running_balance = balance

        return entries
