"""테스트용 in-memory 저장소 / 빌더 모음."""

from __future__ import annotations

import io
import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import BinaryIO, Callable

from common.eventbus.core import Event

from print_service.app.config import EarningsConfig, RetryPolicy
from print_service.app.errors import ConflictError, NotFoundError, TransientStoreError
from print_service.app.models.adjustment import ManualAdjustment
from print_service.app.models.catalog import CatalogModel
from print_service.app.models.earnings import LedgerSnapshot
from print_service.app.models.order import Order, OrderFilter, OrderStatus
from print_service.app.models.photographer import Actor, BankDetails, Photographer
from print_service.app.models.redeem import RedeemRequest, RedeemStatus


BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

EARNINGS = EarningsConfig(
    earning_per_order=Decimal("300"), penalty_per_unaccepted=Decimal("100")
)

# 테스트에서는 실제로 잠들지 않도록 대기 시간을 0 으로 둔다.
FAST_RETRY = RetryPolicy(max_attempts=5, base_delay=0.0, timeout=5.0)

ADMIN = Actor(uid="admin-uid", email="admin@printdesk.test", is_admin=True)


def at(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


def actor_for(uid: str = "uid-1") -> Actor:
    return Actor(uid=uid, email=f"{uid}@printdesk.test", is_admin=False)


# -------- Builders --------


def build_photographer(
    *,
    uid: str = "uid-1",
    photographer_id: str = "JOHN001",
    display_name: str = "John Doe",
    order_counter: int = 0,
    bank_complete: bool = True,
) -> Photographer:
    bank = (
        BankDetails(account_name="John Doe", account_number="1234567890", ifsc="HDFC0001")
        if bank_complete
        else BankDetails()
    )
    return Photographer(
        uid=uid,
        photographer_id=photographer_id,
        display_name=display_name,
        email=f"{uid}@printdesk.test",
        phone_number="9876543210",
        order_counter=order_counter,
        bank_details=bank,
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
    )


def build_order(
    seq: int,
    status: OrderStatus = OrderStatus.PENDING,
    *,
    uid: str = "uid-1",
    photographer_id: str = "JOHN001",
    created_at: datetime | None = None,
) -> Order:
    created = created_at or at(seq)
    return Order(
        id=f"oid-{photographer_id}-{seq}",
        order_id=f"{photographer_id}_{seq:03d}",
        photographer_uid=uid,
        photographer_id=photographer_id,
        photographer_name="John Doe",
        buyer_name="Buyer",
        buyer_phone="9999999999",
        buyer_address="1 Main St",
        buyer_pincode="560001",
        model_id="model-1",
        model_name="Bust",
        photo_urls=[f"/api/v1/photos/p{seq}"],
        status=status,
        created_at=created,
        updated_at=created,
    )


def build_adjustment(
    amount: str,
    *,
    uid: str = "uid-1",
    created_at: datetime | None = None,
    remarks: str = "bonus",
    adjustment_id: str | None = None,
) -> ManualAdjustment:
    return ManualAdjustment(
        id=adjustment_id,
        photographer_uid=uid,
        photographer_id="JOHN001",
        amount=Decimal(amount),
        remarks=remarks,
        admin_uid=ADMIN.uid,
        admin_email=ADMIN.email,
        created_at=created_at or BASE_TIME,
    )


def build_redeem(
    amount: str,
    status: RedeemStatus = RedeemStatus.PENDING,
    *,
    amount_paid: str = "0",
    uid: str = "uid-1",
    redeem_id: str | None = None,
    requested_at: datetime | None = None,
    processed_at: datetime | None = None,
) -> RedeemRequest:
    return RedeemRequest(
        id=redeem_id,
        photographer_uid=uid,
        photographer_id="JOHN001",
        photographer_name="John Doe",
        amount=Decimal(amount),
        status=status,
        amount_paid=Decimal(amount_paid),
        requested_at=requested_at or BASE_TIME,
        processed_at=processed_at,
    )


# -------- Fake repositories --------


class FakePhotographerRepository:
    def __init__(self, *photographers: Photographer) -> None:
        self.items: dict[str, Photographer] = {p.uid: p for p in photographers}

    def find_by_uid(self, uid: str) -> Photographer | None:
        return self.items.get(uid)

    def insert(self, photographer: Photographer) -> Photographer:
        if photographer.uid in self.items:
            raise ConflictError("duplicate uid")
        if any(
            p.photographer_id == photographer.photographer_id for p in self.items.values()
        ):
            raise ConflictError("duplicate photographer_id")
        self.items[photographer.uid] = photographer
        return photographer

    def update_profile(
        self, uid: str, display_name: str, email: str, phone_number: str
    ) -> Photographer | None:
        current = self.items.get(uid)
        if current is None:
            return None
        updated = current.model_copy(
            update={
                "display_name": display_name,
                "email": email,
                "phone_number": phone_number,
            }
        )
        self.items[uid] = updated
        return updated

    def update_bank_details(self, uid: str, bank_details: BankDetails) -> Photographer | None:
        current = self.items.get(uid)
        if current is None:
            return None
        updated = current.model_copy(update={"bank_details": bank_details})
        self.items[uid] = updated
        return updated

    def list(
        self, search: str | None, page: int, page_size: int
    ) -> tuple[list[Photographer], int]:
        items = sorted(self.items.values(), key=lambda p: p.photographer_id)
        if search:
            needle = search.lower()
            items = [
                p
                for p in items
                if needle in p.display_name.lower()
                or needle in p.email.lower()
                or needle in p.photographer_id.lower()
            ]
        start = (page - 1) * page_size
        return items[start : start + page_size], len(items)

    def list_all(self) -> list[Photographer]:
        return sorted(self.items.values(), key=lambda p: p.photographer_id)


class FakeCounterRepository:
    """스레드 안전한 카운터. transient_failures 만큼 먼저 TransientStoreError 를 낸다."""

    def __init__(
        self,
        photographers: FakePhotographerRepository | None = None,
        *,
        transient_failures: int = 0,
    ) -> None:
        self._lock = threading.Lock()
        self.photographer_counter = 0
        self.photographers = photographers or FakePhotographerRepository()
        self.transient_failures = transient_failures
        self.calls = 0

    def _maybe_fail(self) -> None:
        self.calls += 1
        if self.transient_failures > 0:
            self.transient_failures -= 1
            raise TransientStoreError("write conflict")

    def increment_photographer_counter(self) -> int:
        with self._lock:
            self._maybe_fail()
            self.photographer_counter += 1
            return self.photographer_counter

    def increment_order_counter(self, photographer_uid: str) -> tuple[str, int] | None:
        with self._lock:
            self._maybe_fail()
            current = self.photographers.find_by_uid(photographer_uid)
            if current is None:
                return None
            updated = current.model_copy(update={"order_counter": current.order_counter + 1})
            self.photographers.items[photographer_uid] = updated
            return updated.photographer_id, updated.order_counter


class FakeOrderRepository:
    def __init__(self, *orders: Order) -> None:
        self.items: list[Order] = list(orders)
        self.fail_insert: Exception | None = None

    def insert(self, order: Order) -> Order:
        if self.fail_insert is not None:
            raise self.fail_insert
        if any(o.order_id == order.order_id for o in self.items):
            raise ConflictError("duplicate order_id")
        if order.idempotency_key and self.find_by_idempotency_key(
            order.photographer_uid, order.idempotency_key
        ):
            raise ConflictError("duplicate idempotency key")
        created = order.model_copy(update={"id": f"oid-{len(self.items) + 1}"})
        self.items.append(created)
        return created

    def find_by_order_id(self, order_id: str) -> Order | None:
        return next((o for o in self.items if o.order_id == order_id), None)

    def find_by_idempotency_key(self, photographer_uid: str, key: str) -> Order | None:
        return next(
            (
                o
                for o in self.items
                if o.photographer_uid == photographer_uid and o.idempotency_key == key
            ),
            None,
        )

    def list_by_photographer(self, photographer_uid: str) -> list[Order]:
        return [o for o in self.items if o.photographer_uid == photographer_uid]

    def list(self, flt: OrderFilter) -> tuple[list[Order], int]:
        items = [
            o
            for o in self.items
            if (flt.status is None or o.status == flt.status)
            and (flt.model_id is None or o.model_id == flt.model_id)
            and (flt.photographer_id is None or o.photographer_id == flt.photographer_id)
        ]
        start = (flt.page - 1) * flt.page_size
        return items[start : start + flt.page_size], len(items)

    def save_status(self, order: Order) -> Order | None:
        for index, current in enumerate(self.items):
            if current.order_id == order.order_id:
                self.items[index] = order
                return order
        return None

    def count_by_status(self) -> dict[OrderStatus, int]:
        counts = {status: 0 for status in OrderStatus}
        for order in self.items:
            counts[order.status] += 1
        return counts

    def list_all(self) -> list[Order]:
        return list(self.items)


class FakeAdjustmentRepository:
    def __init__(self, *adjustments: ManualAdjustment) -> None:
        self.items: list[ManualAdjustment] = list(adjustments)

    def insert(self, adjustment: ManualAdjustment) -> ManualAdjustment:
        created = adjustment.model_copy(update={"id": f"adj-{len(self.items) + 1}"})
        self.items.append(created)
        return created

    def list_by_photographer(self, photographer_uid: str) -> list[ManualAdjustment]:
        return [a for a in self.items if a.photographer_uid == photographer_uid]

    def list_all(self) -> list[ManualAdjustment]:
        return list(self.items)


class FakeRedeemRepository:
    """resolution_failures 만큼 apply_resolution 이 반영 전에 TransientStoreError 를 낸다.

    lost_acks 만큼은 반영한 뒤에 같은 예외를 낸다 (커밋 응답 유실).
    """

    def __init__(
        self,
        *requests: RedeemRequest,
        resolution_failures: int = 0,
        lost_acks: int = 0,
    ) -> None:
        self._lock = threading.Lock()
        self.items: list[RedeemRequest] = []
        self.resolution_failures = resolution_failures
        self.lost_acks = lost_acks
        self.resolution_calls = 0
        for request in requests:
            self.add(request)

    def add(self, request: RedeemRequest) -> RedeemRequest:
        created = request
        if created.id is None:
            created = request.model_copy(update={"id": f"rdm-{len(self.items) + 1}"})
        self.items.append(created)
        return created

    def find_by_id(self, id_value: str) -> RedeemRequest | None:
        return next((r for r in self.items if r.id == id_value), None)

    def list_by_photographer(self, photographer_uid: str) -> list[RedeemRequest]:
        return [r for r in self.items if r.photographer_uid == photographer_uid]

    def list_by_status(
        self, status: RedeemStatus, page: int, page_size: int
    ) -> tuple[list[RedeemRequest], int]:
        items = [r for r in self.items if r.status == status]
        start = (page - 1) * page_size
        return items[start : start + page_size], len(items)

    def count_by_status(self, status: RedeemStatus) -> int:
        return sum(1 for r in self.items if r.status == status)

    def apply_resolution(self, resolved: RedeemRequest) -> RedeemRequest | None:
        with self._lock:
            self.resolution_calls += 1
            if self.resolution_failures > 0:
                self.resolution_failures -= 1
                raise TransientStoreError("write conflict")
            for index, current in enumerate(self.items):
                if current.id == resolved.id:
                    if current.status != RedeemStatus.PENDING:
                        return None
                    self.items[index] = resolved
                    if self.lost_acks > 0:
                        self.lost_acks -= 1
                        raise TransientStoreError("commit result unknown")
                    return resolved
        return None

    def list_all(self) -> list[RedeemRequest]:
        return list(self.items)


class FakeLedgerStore:
    """전역 락으로 트랜잭션을 흉내 낸다. conflicts 만큼 먼저 TransientStoreError 를 낸다."""

    def __init__(
        self,
        photographers: FakePhotographerRepository,
        orders: FakeOrderRepository | None = None,
        adjustments: FakeAdjustmentRepository | None = None,
        redeems: FakeRedeemRepository | None = None,
        *,
        conflicts: int = 0,
    ) -> None:
        self._lock = threading.Lock()
        self.photographers = photographers
        self.orders = orders or FakeOrderRepository()
        self.adjustments = adjustments or FakeAdjustmentRepository()
        self.redeems = redeems or FakeRedeemRepository()
        self.conflicts = conflicts
        self.attempts = 0

    def load_snapshot(self, photographer_uid: str) -> LedgerSnapshot:
        return LedgerSnapshot(
            orders=self.orders.list_by_photographer(photographer_uid),
            adjustments=self.adjustments.list_by_photographer(photographer_uid),
            redeems=self.redeems.list_by_photographer(photographer_uid),
        )

    def submit_redeem(
        self,
        photographer_uid: str,
        idempotency_key: str | None,
        decide: Callable[[Photographer, LedgerSnapshot], RedeemRequest],
    ) -> tuple[RedeemRequest, bool]:
        with self._lock:
            self.attempts += 1
            if self.conflicts > 0:
                self.conflicts -= 1
                raise TransientStoreError("write conflict")

            photographer = self.photographers.find_by_uid(photographer_uid)
            if photographer is None:
                raise NotFoundError(photographer_uid)

            if idempotency_key:
                for request in self.redeems.items:
                    if (
                        request.photographer_uid == photographer_uid
                        and request.idempotency_key == idempotency_key
                    ):
                        return request, False

            request = decide(photographer, self.load_snapshot(photographer_uid))
            return self.redeems.add(request), True


class FakeCatalogRepository:
    def __init__(self, *models: CatalogModel) -> None:
        self.items: dict[str, CatalogModel] = {m.id or "": m for m in models}

    def list(self) -> list[CatalogModel]:
        return sorted(self.items.values(), key=lambda m: m.model_name)

    def find_by_id(self, id_value: str) -> CatalogModel | None:
        return self.items.get(id_value)

    def insert(self, model: CatalogModel) -> CatalogModel:
        created = model.model_copy(update={"id": f"model-{len(self.items) + 1}"})
        self.items[created.id or ""] = created
        return created

    def delete(self, id_value: str) -> bool:
        return self.items.pop(id_value, None) is not None


class FakePhotoStorage:
    def __init__(self, *, fail_on_upload: int | None = None) -> None:
        self.files: dict[str, tuple[bytes, str, str | None]] = {}
        self.deleted: list[str] = []
        self.fail_on_upload = fail_on_upload
        self.fail_on_delete = False
        self._uploads = 0

    def upload(
        self, owner: str, filename: str, data: bytes, content_type: str | None
    ) -> str:
        self._uploads += 1
        if self.fail_on_upload is not None and self._uploads == self.fail_on_upload:
            raise OSError("upload failed")
        file_id = f"file{self._uploads}"
        self.files[file_id] = (data, filename, content_type)
        return f"/api/v1/photos/{file_id}"

    def delete(self, url: str) -> bool:
        if self.fail_on_delete:
            raise OSError("delete failed")
        file_id = url.rsplit("/", 1)[-1]
        self.deleted.append(url)
        return self.files.pop(file_id, None) is not None

    def open(self, file_id: str) -> tuple[BinaryIO, str | None, str] | None:
        stored = self.files.get(file_id)
        if stored is None:
            return None
        data, filename, content_type = stored
        return io.BytesIO(data), filename, content_type or "application/octet-stream"


class FakeAuditRepository:
    def __init__(self) -> None:
        self.entries: list[dict] = []

    def append(self, entry: dict) -> bool:
        if any(e["event_id"] == entry["event_id"] for e in self.entries):
            return False
        self.entries.append(entry)
        return True


class FakeEventBus:
    def __init__(self, *, fail: bool = False) -> None:
        self.published: list[tuple[str, Event]] = []
        self.fail = fail

    def publish(self, topic: str, event: Event) -> None:
        if self.fail:
            raise RuntimeError("kafka down")
        self.published.append((topic, event))

    def types(self) -> list[str]:
        return [event.payload["type"] for _, event in self.published]
