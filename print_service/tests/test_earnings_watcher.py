from __future__ import annotations

import threading
from decimal import Decimal
from typing import Callable

from print_service.app.ledger.engine import LedgerEngine
from print_service.app.listeners.earnings_watcher import WATCHED_COLLECTIONS, EarningsWatcher
from print_service.app.models.earnings import EarningsSummary
from print_service.app.models.order import OrderStatus
from print_service.app.models.redeem import RedeemStatus

from print_service.tests.fakes import (
    EARNINGS,
    FakeLedgerStore,
    FakePhotographerRepository,
    build_adjustment,
    build_order,
    build_photographer,
    build_redeem,
)


class FakeChangeFeed:
    """watch() 가 등록한 콜백을 테스트에서 직접 호출한다."""

    def __init__(self) -> None:
        self.listeners: dict[str, Callable[[], None]] = {}
        self.registered = {name: threading.Event() for name in WATCHED_COLLECTIONS}
        self.finished: list[str] = []

    def on_subscribe(self, collection: str) -> None:
        pass

    def watch(
        self,
        collection: str,
        photographer_uid: str,
        stop: threading.Event,
        on_change: Callable[[], None],
        ready: threading.Event,
    ) -> None:
        self.listeners[collection] = on_change
        self.on_subscribe(collection)
        self.registered[collection].set()
        ready.set()
        stop.wait()
        self.finished.append(collection)

    def fire(self, collection: str) -> None:
        assert self.registered[collection].wait(2.0)
        self.listeners[collection]()


def _watcher(store: FakeLedgerStore, feed: FakeChangeFeed, seen: list[EarningsSummary]) -> EarningsWatcher:
    return EarningsWatcher("uid-1", store, LedgerEngine(EARNINGS), feed, seen.append)


def test_emits_initial_summary_and_updates_on_change() -> None:
    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))
    store.orders.items.append(build_order(1, OrderStatus.DELIVERED))
    feed = FakeChangeFeed()
    seen: list[EarningsSummary] = []

    with _watcher(store, feed, seen):
        # when
        store.orders.items.append(build_order(2, OrderStatus.DELIVERED))
        feed.fire("orders")
        store.adjustments.items.append(build_adjustment("-50"))
        feed.fire("manual_adjustments")
        store.redeems.add(build_redeem("100", RedeemStatus.PAID, amount_paid="100"))
        feed.fire("redeem_requests")

    # then
    balances = [s.redeemable_earnings for s in seen]
    assert balances == [Decimal("300"), Decimal("600"), Decimal("550"), Decimal("450")]


def test_change_only_refreshes_that_collection() -> None:
    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))
    feed = FakeChangeFeed()
    seen: list[EarningsSummary] = []

    with _watcher(store, feed, seen):
        store.orders.items.append(build_order(1, OrderStatus.DELIVERED))
        store.adjustments.items.append(build_adjustment("10"))
        feed.fire("manual_adjustments")

    # orders 변경 알림이 아직 오지 않았으므로 조정만 반영된다.
    assert seen[-1].redeemable_earnings == Decimal("10")


def test_close_stops_all_streams_and_callbacks() -> None:
    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))
    feed = FakeChangeFeed()
    seen: list[EarningsSummary] = []
    watcher = _watcher(store, feed, seen).start()
    for name in WATCHED_COLLECTIONS:
        assert feed.registered[name].wait(2.0)

    # when
    watcher.close()
    feed.listeners["orders"]()

    # then
    assert watcher.closed
    assert sorted(feed.finished) == sorted(WATCHED_COLLECTIONS)
    assert len(seen) == 1


def test_stream_failure_is_logged_not_raised() -> None:
    class BrokenFeed:
        def watch(self, collection, photographer_uid, stop, on_change, ready) -> None:
            raise RuntimeError("not a replica set")

    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))
    seen: list[EarningsSummary] = []
    watcher = EarningsWatcher("uid-1", store, LedgerEngine(EARNINGS), BrokenFeed(), seen.append)

    watcher.start()
    watcher.close()

    assert len(seen) == 1


def test_snapshot_is_loaded_after_every_stream_is_open() -> None:
    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))
    events: list[str] = []
    original_load = store.load_snapshot

    def load_snapshot(uid: str, **kwargs):
        events.append("snapshot")
        return original_load(uid, **kwargs)

    store.load_snapshot = load_snapshot  # type: ignore[method-assign]

    class RecordingFeed(FakeChangeFeed):
        def on_subscribe(self, collection: str) -> None:
            events.append(collection)

    seen: list[EarningsSummary] = []

    with _watcher(store, RecordingFeed(), seen):
        pass

    assert sorted(events[:3]) == sorted(WATCHED_COLLECTIONS)
    assert events[3:] == ["snapshot"]


def test_write_between_subscribe_and_snapshot_is_in_initial_summary() -> None:
    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))

    class RacingFeed(FakeChangeFeed):
        def on_subscribe(self, collection: str) -> None:
            # 구독이 열린 직후, 초기 스냅샷을 읽기 전에 주문이 배송 완료로 들어온다.
            if collection == "orders":
                store.orders.items.append(build_order(1, OrderStatus.DELIVERED))

    seen: list[EarningsSummary] = []

    with _watcher(store, RacingFeed(), seen):
        pass

    assert seen[0].redeemable_earnings == Decimal("300")


def test_stream_that_never_opens_does_not_block_forever() -> None:
    class StuckFeed(FakeChangeFeed):
        def watch(self, collection, photographer_uid, stop, on_change, ready) -> None:
            if collection == "orders":
                stop.wait()
                return
            super().watch(collection, photographer_uid, stop, on_change, ready)

    store = FakeLedgerStore(FakePhotographerRepository(build_photographer()))
    seen: list[EarningsSummary] = []
    watcher = EarningsWatcher(
        "uid-1", store, LedgerEngine(EARNINGS), StuckFeed(), seen.append, ready_timeout=0.05
    )

    watcher.start()
    watcher.close()

    assert len(seen) == 1
