"""포토그래퍼 한 명의 잔액을 실시간으로 다시 계산해 알려주는 리스너.

orders / manual_adjustments / redeem_requests 세 컬렉션의 change stream 을 컬렉션마다
스레드 하나로 구독한다. 어느 컬렉션이든 변경이 오면 그 컬렉션의 최신 목록을 다시 읽고,
세 컬렉션의 최신 목록으로 EarningsSummary 를 계산해 콜백을 호출한다.

구독을 모두 연 뒤에 초기 스냅샷을 읽는다. 그 사이의 쓰기는 스냅샷이나 change stream 중 적어도
한쪽에는 반드시 잡힌다.

컬렉션끼리는 트랜잭션으로 묶여 있지 않으므로 중간 합계가 잠깐 어긋날 수 있고, 다음 변경에서
바로잡힌다. 화면 표시용 값이며 정산 요청 검증에는 쓰지 않는다.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from pymongo.database import Database

from ..ledger.engine import LedgerEngine
from ..models.earnings import EarningsSummary, LedgerSnapshot
from ..repositories.interfaces import LedgerStoreInterface


logger = logging.getLogger(__name__)

WATCHED_COLLECTIONS = ("orders", "manual_adjustments", "redeem_requests")

# change stream 이 비어 있을 때 stop 플래그를 다시 확인하기까지의 대기 시간
DEFAULT_MAX_AWAIT_MS = 1000

# 구독 스레드가 stream 을 열 때까지 start() 가 기다리는 최대 시간(초)
DEFAULT_READY_TIMEOUT = 5.0


class ChangeFeedInterface(Protocol):
    def watch(
        self,
        collection: str,
        photographer_uid: str,
        stop: threading.Event,
        on_change: Callable[[], None],
        ready: threading.Event,
    ) -> None:  # pragma: no cover - Protocol
        """stop 이 설정될 때까지 블록하며, 변경이 올 때마다 on_change 를 호출한다.

        구독이 열려 이후의 변경을 놓치지 않게 된 시점에 ready 를 설정한다.
        """
        ...


class MongoChangeFeed(ChangeFeedInterface):
    """MongoDB change stream 구현. replica set 에서만 동작한다."""

    def __init__(self, database: Database, max_await_ms: int = DEFAULT_MAX_AWAIT_MS) -> None:
        self._db = database
        self._max_await_ms = max_await_ms

    def watch(
        self,
        collection: str,
        photographer_uid: str,
        stop: threading.Event,
        on_change: Callable[[], None],
        ready: threading.Event,
    ) -> None:
        pipeline = [{"$match": {"fullDocument.photographer_uid": photographer_uid}}]
        with self._db[collection].watch(
            pipeline,
            full_document="updateLookup",
            max_await_time_ms=self._max_await_ms,
        ) as stream:
            # aggregate 가 서버에서 실행된 뒤라 이후 변경은 이 stream 으로 들어온다.
            ready.set()
            while not stop.is_set() and stream.alive:
                change = stream.try_next()
                if change is None:
                    continue
                on_change()


class EarningsWatcher:
    def __init__(
        self,
        photographer_uid: str,
        store: LedgerStoreInterface,
        engine: LedgerEngine,
        feed: ChangeFeedInterface,
        callback: Callable[[EarningsSummary], None],
        ready_timeout: float = DEFAULT_READY_TIMEOUT,
    ) -> None:
        self._uid = photographer_uid
        self._store = store
        self._engine = engine
        self._feed = feed
        self._callback = callback
        self._ready_timeout = ready_timeout
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self._snapshot = LedgerSnapshot()

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def start(self) -> "EarningsWatcher":
        """컬렉션별 구독 스레드를 띄우고, 구독이 열린 뒤 초기 잔액을 한 번 알린다."""

        opened: list[threading.Event] = []
        for collection in WATCHED_COLLECTIONS:
            ready = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(collection, ready),
                name=f"earnings-watch-{collection}",
                daemon=True,
            )
            self._threads.append(thread)
            opened.append(ready)
            thread.start()

        for collection, ready in zip(WATCHED_COLLECTIONS, opened):
            if not ready.wait(self._ready_timeout):
                logger.warning(
                    "earnings watcher stream for %s not ready",
                    collection,
                    extra={"photographer_uid": self._uid},
                )

        with self._lock:
            self._snapshot = self._store.load_snapshot(self._uid)
        self._emit()
        return self

    def close(self, timeout: float | None = 5.0) -> None:
        """모든 구독을 해제한다. 여러 번 호출해도 된다."""

        self._stop.set()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join(timeout)
        self._threads.clear()

    def __enter__(self) -> "EarningsWatcher":
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _run(self, collection: str, ready: threading.Event) -> None:
        try:
            self._feed.watch(
                collection,
                self._uid,
                self._stop,
                lambda: self._on_change(collection),
                ready,
            )
        except Exception:  # noqa: BLE001
            logger.exception(
                "earnings watcher stream for %s stopped",
                collection,
                extra={"photographer_uid": self._uid},
            )
        finally:
            ready.set()

    def _on_change(self, collection: str) -> None:
        if self._stop.is_set():
            return
        # 읽기와 교체를 락 안에서 해서 늦게 읽은 목록이 먼저 읽은 목록에 덮이지 않게 한다.
        with self._lock:
            fresh = self._store.load_snapshot(self._uid)
            if collection == "orders":
                self._snapshot = self._snapshot.model_copy(update={"orders": fresh.orders})
            elif collection == "manual_adjustments":
                self._snapshot = self._snapshot.model_copy(
                    update={"adjustments": fresh.adjustments}
                )
            else:
                self._snapshot = self._snapshot.model_copy(update={"redeems": fresh.redeems})
        self._emit()

    def _emit(self) -> None:
        with self._lock:
            snapshot = self._snapshot
        summary = self._engine.summarize(
            snapshot.orders, snapshot.adjustments, snapshot.redeems
        )
        if not self._stop.is_set():
            self._callback(summary)
