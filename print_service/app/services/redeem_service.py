"""정산 요청 접수 / 처리.

접수는 LedgerStore 트랜잭션 안에서 원본 도큐먼트를 다시 읽어 잔액을 계산한 뒤에만 insert 한다.
캐시된 잔액이나 화면에 표시된 값으로 검증하지 않는다.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database

from ..config import AppConfig, RetryPolicy, get_config
from ..errors import InvalidStateError, NotFoundError, PermissionDeniedError, TransientStoreError
from ..ledger.engine import LedgerEngine
from ..models.earnings import LedgerSnapshot
from ..models.photographer import Actor, Photographer
from ..models.redeem import RedeemRequest, RedeemStatus
from ..repositories.interfaces import LedgerStoreInterface, RedeemRepositoryInterface
from ..repositories.ledger_store import MongoLedgerStore
from ..repositories.redeem_repository import RedeemRepository
from ..workflows.redeem import RedeemWorkflow, parse_decision
from .ledger_events import LedgerEventPublisher, get_ledger_event_publisher
from .retry import run_with_retry


logger = logging.getLogger(__name__)


class RedeemService:
    def __init__(
        self,
        repo: RedeemRepositoryInterface,
        store: LedgerStoreInterface,
        engine: LedgerEngine,
        retry: RetryPolicy,
        events: LedgerEventPublisher,
        workflow: RedeemWorkflow | None = None,
    ) -> None:
        self._repo = repo
        self._store = store
        self._engine = engine
        self._retry = retry
        self._events = events
        self._workflow = workflow or RedeemWorkflow()

    def submit(
        self,
        actor: Actor,
        amount: Decimal | int | float | str,
        idempotency_key: str | None = None,
    ) -> RedeemRequest:
        """본인 명의로 정산 요청을 낸다.

        같은 멱등성 키로 다시 호출하면 기존 요청을 돌려준다. 트랜잭션 충돌은
        재시도 정책만큼 다시 시도하고, 그래도 실패하면 TransientStoreError.
        """

        def decide(photographer: Photographer, snapshot: LedgerSnapshot) -> RedeemRequest:
            summary = self._engine.summarize(
                snapshot.orders, snapshot.adjustments, snapshot.redeems
            )
            return self._workflow.submit(
                photographer,
                amount,
                summary,
                now=datetime.now(timezone.utc),
                idempotency_key=idempotency_key,
            )

        request, created = run_with_retry(
            lambda: self._store.submit_redeem(actor.uid, idempotency_key, decide),
            self._retry,
            name="redeem submission",
            exhausted=TransientStoreError,
        )

        if created:
            logger.info(
                "redeem request submitted",
                extra={
                    "photographer_uid": actor.uid,
                    "redeem_id": request.id,
                    "amount": str(request.amount),
                },
            )
            self._events.redeem_submitted(request)
        return request

    def resolve(
        self,
        actor: Actor,
        redeem_id: str,
        decision: str | RedeemStatus,
        amount_paid: Decimal | int | float | str | None = None,
        remarks: str = "",
        resolution_key: str | None = None,
    ) -> RedeemRequest:
        """관리자가 pending 요청을 paid / rejected 로 한 번만 처리한다.

        같은 resolution_key 로 이미 처리된 요청이면 저장된 결과를 그대로 돌려준다.
        """

        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can resolve redeem requests")

        request = self._repo.find_by_id(redeem_id)
        if request is None:
            raise NotFoundError(f"redeem request not found: {redeem_id}")

        if self._is_replay(request, decision, resolution_key):
            return request

        resolved = self._workflow.resolve(
            request,
            decision,
            is_admin=actor.is_admin,
            now=datetime.now(timezone.utc),
            amount_paid=amount_paid,
            remarks=remarks,
            admin_uid=actor.uid,
            resolution_key=resolution_key,
        )

        # 저장 실패처럼 보였지만 실제로는 반영된 경우, 재시도는 None 을 받고
        # 아래 resolution_key 비교로 저장된 결과를 돌려준다.
        saved = run_with_retry(
            lambda: self._repo.apply_resolution(resolved),
            self._retry,
            name="redeem resolution",
            exhausted=TransientStoreError,
        )
        if saved is None:
            # 읽은 뒤 다른 호출이 먼저 처리했다.
            current = self._repo.find_by_id(redeem_id)
            if current is None:
                raise NotFoundError(f"redeem request not found: {redeem_id}")
            if not self._is_replay(current, decision, resolution_key):
                raise InvalidStateError(
                    f"redeem request {redeem_id} is already {current.status}"
                )
            # 읽을 때는 pending 이었으니 같은 키의 앞선 시도가 반영한 것이다.
            saved = current

        logger.info(
            "redeem request %s",
            saved.status,
            extra={
                "actor_uid": actor.uid,
                "photographer_uid": saved.photographer_uid,
                "redeem_id": saved.id,
                "amount": str(saved.amount_paid),
            },
        )
        self._events.redeem_resolved(saved)
        return saved

    @staticmethod
    def _is_replay(
        request: RedeemRequest,
        decision: str | RedeemStatus,
        resolution_key: str | None,
    ) -> bool:
        if not resolution_key or not request.is_terminal:
            return False
        if request.resolution_key != resolution_key:
            return False
        return request.status == parse_decision(decision)

    def list_for_photographer(
        self, actor: Actor, photographer_uid: str
    ) -> list[RedeemRequest]:
        if not actor.can_access(photographer_uid):
            raise PermissionDeniedError("cannot view another photographer's redeem requests")
        return self._repo.list_by_photographer(photographer_uid)

    def list_by_status(
        self,
        actor: Actor,
        status: RedeemStatus,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[RedeemRequest], int]:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can list redeem requests")
        return self._repo.list_by_status(status, page, page_size)


def get_redeem_repository(
    db: Database = Depends(get_database),
) -> RedeemRepositoryInterface:
    return RedeemRepository(db)


def get_ledger_store(
    db: Database = Depends(get_database),
) -> LedgerStoreInterface:
    """FastAPI DI용 트랜잭션 원장 저장소 팩토리."""

    return MongoLedgerStore(db)


def get_redeem_service(
    repo: RedeemRepositoryInterface = Depends(get_redeem_repository),
    store: LedgerStoreInterface = Depends(get_ledger_store),
    config: AppConfig = Depends(get_config),
    events: LedgerEventPublisher = Depends(get_ledger_event_publisher),
) -> RedeemService:
    return RedeemService(
        repo=repo,
        store=store,
        engine=LedgerEngine(config.earnings),
        retry=config.retry,
        events=events,
    )
