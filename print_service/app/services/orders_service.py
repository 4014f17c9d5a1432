"""주문 생성 / 조회 / 상태 변경.

주문 생성 순서: 사진 업로드 -> 주문 번호 발급 -> 주문 도큐먼트 insert.
중간 단계가 실패하면 이미 올라간 사진을 지워 고아 파일이 남지 않게 한다.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database

from ..config import AppConfig, get_config
from ..errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..ledger.engine import LedgerEngine
from ..models.order import Order, OrderFilter, OrderPlacementInput, OrderStatus
from ..models.photographer import Actor
from ..repositories.interfaces import (
    CatalogRepositoryInterface,
    OrderRepositoryInterface,
    PhotoStorageInterface,
    PhotographerRepositoryInterface,
)
from ..repositories.order_repository import OrderRepository
from ..workflows.order_status import OrderStatusWorkflow
from .catalog_service import get_catalog_repository, get_photo_storage
from .identifier_allocator import IdentifierAllocator, get_identifier_allocator
from .ledger_events import LedgerEventPublisher, get_ledger_event_publisher
from .photographers_service import get_photographer_repository


logger = logging.getLogger(__name__)


def _require(value: str, message: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(message)
    return text


class OrdersService:
    def __init__(
        self,
        order_repo: OrderRepositoryInterface,
        photographer_repo: PhotographerRepositoryInterface,
        catalog_repo: CatalogRepositoryInterface,
        storage: PhotoStorageInterface,
        allocator: IdentifierAllocator,
        workflow: OrderStatusWorkflow,
        events: LedgerEventPublisher,
    ) -> None:
        self._order_repo = order_repo
        self._photographer_repo = photographer_repo
        self._catalog_repo = catalog_repo
        self._storage = storage
        self._allocator = allocator
        self._workflow = workflow
        self._events = events

    # 생성 ---------------------------------------------------------------------

    def place_order(self, actor: Actor, data: OrderPlacementInput) -> Order:
        """주문을 만든다. 같은 멱등성 키로 다시 호출하면 기존 주문을 그대로 돌려준다."""

        photographer = self._photographer_repo.find_by_uid(actor.uid)
        if photographer is None:
            raise NotFoundError(f"photographer not found: {actor.uid}")

        if data.idempotency_key:
            existing = self._order_repo.find_by_idempotency_key(
                actor.uid, data.idempotency_key
            )
            if existing is not None:
                logger.info(
                    "order placement replayed by idempotency key",
                    extra={"photographer_uid": actor.uid, "order_id": existing.order_id},
                )
                return existing

        buyer_name = _require(data.buyer_name, "Buyer name is required.")
        buyer_phone = _require(data.buyer_phone, "Buyer phone is required.")
        buyer_address = _require(data.buyer_address, "Buyer address is required.")
        buyer_pincode = _require(data.buyer_pincode, "Buyer pincode is required.")
        model_id = _require(data.model_id, "Please select a model.")
        if not data.photos:
            raise ValidationError("Please upload at least one photo.")

        model = self._catalog_repo.find_by_id(model_id)
        if model is None:
            raise ValidationError("Selected model does not exist.")

        uploaded: list[str] = []
        try:
            for photo in data.photos:
                uploaded.append(
                    self._storage.upload(
                        f"orders/{actor.uid}",
                        photo.filename,
                        photo.data,
                        photo.content_type,
                    )
                )

            allocation = self._allocator.allocate_order_id(actor.uid)

            now = datetime.now(timezone.utc)
            order = Order(
                order_id=allocation.order_id,
                photographer_uid=actor.uid,
                photographer_id=allocation.photographer_id,
                photographer_name=photographer.display_name,
                buyer_name=buyer_name,
                buyer_phone=buyer_phone,
                buyer_address=buyer_address,
                buyer_pincode=buyer_pincode,
                model_id=model_id,
                model_name=model.model_name,
                remarks=(data.remarks or "").strip(),
                photo_urls=uploaded,
                status=OrderStatus.PENDING,
                idempotency_key=data.idempotency_key,
                created_at=now,
                updated_at=now,
            )
            created = self._order_repo.insert(order)
        except ConflictError:
            self._cleanup_photos(uploaded)
            # 같은 멱등성 키로 동시에 들어온 요청이 먼저 커밋된 경우
            if data.idempotency_key:
                existing = self._order_repo.find_by_idempotency_key(
                    actor.uid, data.idempotency_key
                )
                if existing is not None:
                    return existing
            raise
        except Exception:
            self._cleanup_photos(uploaded)
            raise

        logger.info(
            "order placed",
            extra={"photographer_uid": actor.uid, "order_id": created.order_id},
        )
        self._events.order_placed(created, changed_by=actor.uid)
        return created

    def _cleanup_photos(self, urls: list[str]) -> None:
        for url in urls:
            try:
                self._storage.delete(url)
            except Exception:  # noqa: BLE001
                logger.exception("failed to clean up orphaned photo url=%s", url)

    # 조회 ---------------------------------------------------------------------

    def get(self, actor: Actor, order_id: str) -> Order:
        order = self._order_repo.find_by_order_id(order_id)
        if order is None or not actor.can_access(order.photographer_uid):
            raise NotFoundError(f"order not found: {order_id}")
        return order

    def list_for_photographer(self, actor: Actor, photographer_uid: str) -> list[Order]:
        if not actor.can_access(photographer_uid):
            raise PermissionDeniedError("cannot view another photographer's orders")
        return self._order_repo.list_by_photographer(photographer_uid)

    def list_all(self, actor: Actor, flt: OrderFilter) -> tuple[list[Order], int]:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can list all orders")
        return self._order_repo.list(flt)

    # 관리자 변경 ----------------------------------------------------------------

    def set_status(
        self,
        actor: Actor,
        order_id: str,
        status: str | OrderStatus,
        admin_comments: str | None = None,
    ) -> Order:
        order = self._order_repo.find_by_order_id(order_id)
        if order is None:
            raise NotFoundError(f"order not found: {order_id}")

        change = self._workflow.set_status(
            order,
            status,
            is_admin=actor.is_admin,
            now=datetime.now(timezone.utc),
            admin_comments=admin_comments,
        )
        saved = self._order_repo.save_status(change.order)
        if saved is None:
            raise NotFoundError(f"order not found: {order_id}")

        if change.changed:
            logger.info(
                "order status changed %s -> %s",
                change.previous,
                change.current,
                extra={
                    "photographer_uid": saved.photographer_uid,
                    "order_id": saved.order_id,
                    "amount": str(change.earnings_delta),
                },
            )
            self._events.order_status_changed(
                saved, change.previous, change.earnings_delta, changed_by=actor.uid
            )
        return saved

    def update_comments(self, actor: Actor, order_id: str, comments: str) -> Order:
        order = self._order_repo.find_by_order_id(order_id)
        if order is None:
            raise NotFoundError(f"order not found: {order_id}")

        updated = OrderStatusWorkflow.update_comments(
            order,
            comments or "",
            is_admin=actor.is_admin,
            now=datetime.now(timezone.utc),
        )
        saved = self._order_repo.save_status(updated)
        if saved is None:
            raise NotFoundError(f"order not found: {order_id}")
        return saved


def get_order_repository(
    db: Database = Depends(get_database),
) -> OrderRepositoryInterface:
    """FastAPI DI용 OrderRepository 팩토리."""

    return OrderRepository(db)


def get_order_status_workflow(
    config: AppConfig = Depends(get_config),
) -> OrderStatusWorkflow:
    return OrderStatusWorkflow(
        LedgerEngine(config.earnings),
        strict_transitions=config.strict_order_transitions,
    )


def get_orders_service(
    order_repo: OrderRepositoryInterface = Depends(get_order_repository),
    photographer_repo: PhotographerRepositoryInterface = Depends(
        get_photographer_repository
    ),
    catalog_repo: CatalogRepositoryInterface = Depends(get_catalog_repository),
    storage: PhotoStorageInterface = Depends(get_photo_storage),
    allocator: IdentifierAllocator = Depends(get_identifier_allocator),
    workflow: OrderStatusWorkflow = Depends(get_order_status_workflow),
    events: LedgerEventPublisher = Depends(get_ledger_event_publisher),
) -> OrdersService:
    """FastAPI DI용 OrdersService 팩토리."""

    return OrdersService(
        order_repo=order_repo,
        photographer_repo=photographer_repo,
        catalog_repo=catalog_repo,
        storage=storage,
        allocator=allocator,
        workflow=workflow,
        events=events,
    )
