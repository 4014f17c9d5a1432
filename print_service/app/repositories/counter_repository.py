"""단일 도큐먼트 원자적 카운터.

- 전역 포토그래퍼 카운터: counters 컬렉션의 {_id: "photographer", value: N}
- 포토그래퍼별 주문 카운터: photographers.order_counter

둘 다 find_one_and_update + $inc 한 번으로 증가시키므로 동시 호출끼리 같은 값을 받지 않는다.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.database import Database

from ..errors import ConflictError, TransientStoreError
from .interfaces import CounterRepositoryInterface
from .mongo_errors import translate_store_errors


PHOTOGRAPHER_COUNTER_ID = "photographer"


class CounterRepository(CounterRepositoryInterface):
    def __init__(self, database: Database) -> None:
        self._db = database
        self._counters = database["counters"]
        self._photographers = database["photographers"]

    def increment_photographer_counter(self) -> int:
        try:
            with translate_store_errors("increment photographer counter"):
                doc = self._counters.find_one_and_update(
                    {"_id": PHOTOGRAPHER_COUNTER_ID},
                    {"$inc": {"value": 1}},
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
        except ConflictError as exc:
            # 카운터 도큐먼트가 없을 때 동시에 upsert 하면 한쪽이 중복 키로 실패한다.
            raise TransientStoreError("photographer counter upsert race") from exc
        return int(doc["value"])

    def increment_order_counter(self, photographer_uid: str) -> tuple[str, int] | None:
        now = datetime.now(timezone.utc)
        with translate_store_errors("increment order counter"):
            doc = self._photographers.find_one_and_update(
                {"_id": photographer_uid},
                {"$inc": {"order_counter": 1}, "$set": {"updated_at": now}},
                projection={"photographer_id": 1, "order_counter": 1},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            return None
        return doc["photographer_id"], int(doc["order_counter"])
