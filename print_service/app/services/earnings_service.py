"""잔액 / 명세서 / 관리자 집계 조회.

모든 값은 조회 시점의 원본 도큐먼트에서 LedgerEngine 으로 다시 계산한다.
"""

from __future__ import annotations

from collections import defaultdict

from fastapi import Depends

from ..config import AppConfig, get_config
from ..errors import NotFoundError, PermissionDeniedError
from ..ledger.engine import LedgerEngine
from ..models.adjustment import ManualAdjustment
from ..models.earnings import (
    DashboardStats,
    EarningsSummary,
    LedgerTransaction,
    PhotographerEarnings,
)
from ..models.order import IN_PROGRESS_STATUSES, Order, OrderStatus
from ..models.photographer import Actor
from ..models.redeem import RedeemRequest, RedeemStatus
from ..repositories.interfaces import (
    AdjustmentRepositoryInterface,
    LedgerStoreInterface,
    OrderRepositoryInterface,
    PhotographerRepositoryInterface,
    RedeemRepositoryInterface,
)
from .adjustments_service import get_adjustment_repository
from .orders_service import get_order_repository
from .photographers_service import get_photographer_repository
from .redeem_service import get_ledger_store, get_redeem_repository


class EarningsService:
    def __init__(
        self,
        engine: LedgerEngine,
        store: LedgerStoreInterface,
        photographer_repo: PhotographerRepositoryInterface,
        order_repo: OrderRepositoryInterface,
        adjustment_repo: AdjustmentRepositoryInterface,
        redeem_repo: RedeemRepositoryInterface,
    ) -> None:
        self._engine = engine
        self._store = store
        self._photographer_repo = photographer_repo
        self._order_repo = order_repo
        self._adjustment_repo = adjustment_repo
        self._redeem_repo = redeem_repo

    def _check_access(self, actor: Actor, photographer_uid: str) -> None:
        if not actor.can_access(photographer_uid):
            raise PermissionDeniedError("cannot view another photographer's earnings")
        if self._photographer_repo.find_by_uid(photographer_uid) is None:
            raise NotFoundError(f"photographer not found: {photographer_uid}")

    def get_summary(self, actor: Actor, photographer_uid: str) -> EarningsSummary:
        self._check_access(actor, photographer_uid)
        snapshot = self._store.load_snapshot(photographer_uid)
        return self._engine.summarize(
            snapshot.orders, snapshot.adjustments, snapshot.redeems
        )

    def get_statement(
        self, actor: Actor, photographer_uid: str
    ) -> list[LedgerTransaction]:
        self._check_access(actor, photographer_uid)
        snapshot = self._store.load_snapshot(photographer_uid)
        return self._engine.statement(
            snapshot.orders, snapshot.adjustments, snapshot.redeems
        )

    def admin_overview(self, actor: Actor) -> list[PhotographerEarnings]:
        """관리자용: 전체 포토그래퍼와 각자의 현재 정산 가능 잔액."""

        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can view all earnings")

        orders: dict[str, list[Order]] = defaultdict(list)
        for order in self._order_repo.list_all():
            orders[order.photographer_uid].append(order)
        adjustments: dict[str, list[ManualAdjustment]] = defaultdict(list)
        for adjustment in self._adjustment_repo.list_all():
            adjustments[adjustment.photographer_uid].append(adjustment)
        redeems: dict[str, list[RedeemRequest]] = defaultdict(list)
        for request in self._redeem_repo.list_all():
            redeems[request.photographer_uid].append(request)

        result: list[PhotographerEarnings] = []
        for photographer in self._photographer_repo.list_all():
            summary = self._engine.summarize(
                orders[photographer.uid],
                adjustments[photographer.uid],
                redeems[photographer.uid],
            )
            result.append(
                PhotographerEarnings(
                    uid=photographer.uid,
                    photographer_id=photographer.photographer_id,
                    display_name=photographer.display_name,
                    email=photographer.email,
                    redeemable_earnings=summary.redeemable_earnings,
                    delivered=summary.stats.delivered,
                    unaccepted=summary.stats.unaccepted,
                )
            )
        return result

    def dashboard(self, actor: Actor) -> DashboardStats:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can view the dashboard")

        counts = self._order_repo.count_by_status()
        return DashboardStats(
            total_orders=sum(counts.values()),
            delivered=counts.get(OrderStatus.DELIVERED, 0),
            unaccepted=counts.get(OrderStatus.UNACCEPTED, 0),
            rejected=counts.get(OrderStatus.REJECTED, 0),
            in_progress=sum(counts.get(status, 0) for status in IN_PROGRESS_STATUSES),
            redeem_pending=self._redeem_repo.count_by_status(RedeemStatus.PENDING),
        )


def get_earnings_service(
    config: AppConfig = Depends(get_config),
    store: LedgerStoreInterface = Depends(get_ledger_store),
    photographer_repo: PhotographerRepositoryInterface = Depends(
        get_photographer_repository
    ),
    order_repo: OrderRepositoryInterface = Depends(get_order_repository),
    adjustment_repo: AdjustmentRepositoryInterface = Depends(get_adjustment_repository),
    redeem_repo: RedeemRepositoryInterface = Depends(get_redeem_repository),
) -> EarningsService:
    return EarningsService(
        engine=LedgerEngine(config.earnings),
        store=store,
        photographer_repo=photographer_repo,
        order_repo=order_repo,
        adjustment_repo=adjustment_repo,
        redeem_repo=redeem_repo,
    )
