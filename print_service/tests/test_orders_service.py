from __future__ import annotations

import pytest

from print_service.app.config import RetryPolicy
from print_service.app.errors import (
    AllocationFailed,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from print_service.app.ledger.engine import LedgerEngine
from print_service.app.models.catalog import CatalogModel
from print_service.app.models.order import OrderFilter, OrderPlacementInput, OrderStatus, PhotoUpload
from print_service.app.services.identifier_allocator import IdentifierAllocator
from print_service.app.services.ledger_events import LedgerEventPublisher
from print_service.app.services.orders_service import OrdersService
from print_service.app.workflows.order_status import OrderStatusWorkflow

from print_service.tests.fakes import (
    ADMIN,
    BASE_TIME,
    EARNINGS,
    FAST_RETRY,
    FakeCatalogRepository,
    FakeCounterRepository,
    FakeEventBus,
    FakeOrderRepository,
    FakePhotoStorage,
    FakePhotographerRepository,
    actor_for,
    build_order,
    build_photographer,
)


class _Harness:
    def __init__(
        self,
        *,
        order_counter: int = 0,
        transient_failures: int = 0,
        retry: RetryPolicy = FAST_RETRY,
        bus_fail: bool = False,
    ) -> None:
        self.photographers = FakePhotographerRepository(build_photographer(order_counter=order_counter))
        self.counters = FakeCounterRepository(self.photographers, transient_failures=transient_failures)
        self.orders = FakeOrderRepository()
        self.catalog = FakeCatalogRepository(
            CatalogModel(id="model-1", model_name="Bust", created_at=BASE_TIME)
        )
        self.storage = FakePhotoStorage()
        self.bus = FakeEventBus(fail=bus_fail)
        self.service = OrdersService(
            order_repo=self.orders,
            photographer_repo=self.photographers,
            catalog_repo=self.catalog,
            storage=self.storage,
            allocator=IdentifierAllocator(self.counters, retry),
            workflow=OrderStatusWorkflow(LedgerEngine(EARNINGS)),
            events=LedgerEventPublisher(self.bus),
        )


def _input(**overrides) -> OrderPlacementInput:
    values = {
        "buyer_name": "Asha",
        "buyer_phone": "9999999999",
        "buyer_address": "1 Main St",
        "buyer_pincode": "560001",
        "model_id": "model-1",
        "photos": [
            PhotoUpload(filename="a.jpg", content_type="image/jpeg", data=b"a"),
            PhotoUpload(filename="b.jpg", content_type="image/jpeg", data=b"b"),
        ],
    }
    values.update(overrides)
    return OrderPlacementInput(**values)


def test_place_order_allocates_next_id_and_publishes() -> None:
    h = _Harness(order_counter=7)

    # when
    order = h.service.place_order(actor_for("uid-1"), _input())

    # then
    assert order.order_id == "JOHN001_008"
    assert order.status == OrderStatus.PENDING
    assert order.model_name == "Bust"
    assert order.photo_urls == ["/api/v1/photos/file1", "/api/v1/photos/file2"]
    assert h.bus.types() == ["order.placed"]
    assert h.storage.deleted == []


def test_place_order_replays_same_idempotency_key() -> None:
    h = _Harness()

    first = h.service.place_order(actor_for(), _input(idempotency_key="key-1"))
    second = h.service.place_order(actor_for(), _input(idempotency_key="key-1"))

    assert first.order_id == second.order_id
    assert len(h.orders.items) == 1
    assert h.photographers.items["uid-1"].order_counter == 1
    assert h.bus.types() == ["order.placed"]


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"model_id": ""}, "Please select a model."),
        ({"photos": []}, "Please upload at least one photo."),
        ({"model_id": "missing"}, "Selected model does not exist."),
        ({"buyer_name": "  "}, "Buyer name is required."),
    ],
)
def test_place_order_validation(overrides: dict, message: str) -> None:
    h = _Harness()

    with pytest.raises(ValidationError) as info:
        h.service.place_order(actor_for(), _input(**overrides))

    assert str(info.value) == message
    assert h.orders.items == []
    assert h.storage.files == {}
    assert h.counters.calls == 0


def test_place_order_unknown_photographer() -> None:
    h = _Harness()

    with pytest.raises(NotFoundError):
        h.service.place_order(actor_for("stranger"), _input())


def test_failed_allocation_removes_uploaded_photos() -> None:
    h = _Harness(transient_failures=10, retry=RetryPolicy(max_attempts=2, base_delay=0.0))

    with pytest.raises(AllocationFailed):
        h.service.place_order(actor_for(), _input())

    assert h.storage.files == {}
    assert sorted(h.storage.deleted) == ["/api/v1/photos/file1", "/api/v1/photos/file2"]
    assert h.orders.items == []
    assert h.bus.published == []


def test_failed_insert_removes_uploaded_photos() -> None:
    h = _Harness()
    h.orders.fail_insert = RuntimeError("mongo down")

    with pytest.raises(RuntimeError):
        h.service.place_order(actor_for(), _input())

    assert h.storage.files == {}
    assert len(h.storage.deleted) == 2


def test_failed_second_upload_removes_first() -> None:
    h = _Harness()
    h.storage.fail_on_upload = 2

    with pytest.raises(OSError):
        h.service.place_order(actor_for(), _input())

    assert h.storage.deleted == ["/api/v1/photos/file1"]
    assert h.counters.calls == 0


def test_set_status_saves_and_publishes_delta() -> None:
    h = _Harness()
    h.orders.items.append(build_order(1, OrderStatus.SHIPPED))

    # when
    saved = h.service.set_status(ADMIN, "JOHN001_001", "delivered", admin_comments="done")

    # then
    assert saved.status == OrderStatus.DELIVERED
    assert h.orders.find_by_order_id("JOHN001_001").admin_comments == "done"
    _, event = h.bus.published[-1]
    assert event.payload["type"] == "order.status_changed"
    assert event.payload["previous_status"] == "shipped"
    assert event.payload["earnings_delta"] == "300"


def test_set_status_same_status_does_not_publish() -> None:
    h = _Harness()
    h.orders.items.append(build_order(1, OrderStatus.PRINTING))

    h.service.set_status(ADMIN, "JOHN001_001", "printing")

    assert h.bus.published == []


def test_set_status_by_photographer_is_denied() -> None:
    h = _Harness()
    h.orders.items.append(build_order(1))

    with pytest.raises(PermissionDeniedError):
        h.service.set_status(actor_for(), "JOHN001_001", "delivered")

    assert h.orders.items[0].status == OrderStatus.PENDING


def test_event_bus_failure_does_not_fail_request() -> None:
    h = _Harness(bus_fail=True)

    order = h.service.place_order(actor_for(), _input())

    assert order.order_id == "JOHN001_001"


def test_get_hides_other_photographers_orders() -> None:
    h = _Harness()
    h.orders.items.append(build_order(1))

    assert h.service.get(actor_for("uid-1"), "JOHN001_001").order_id == "JOHN001_001"
    with pytest.raises(NotFoundError):
        h.service.get(actor_for("uid-2"), "JOHN001_001")


def test_list_all_is_admin_only() -> None:
    h = _Harness()
    h.orders.items.extend([build_order(1, OrderStatus.DELIVERED), build_order(2)])

    items, total = h.service.list_all(ADMIN, OrderFilter(status=OrderStatus.DELIVERED))
    assert total == 1
    assert items[0].order_id == "JOHN001_001"

    with pytest.raises(PermissionDeniedError):
        h.service.list_all(actor_for(), OrderFilter())


def test_update_comments_admin_only() -> None:
    h = _Harness()
    h.orders.items.append(build_order(1))

    saved = h.service.update_comments(ADMIN, "JOHN001_001", "call buyer")
    assert saved.admin_comments == "call buyer"

    with pytest.raises(PermissionDeniedError):
        h.service.update_comments(actor_for(), "JOHN001_001", "nope")
