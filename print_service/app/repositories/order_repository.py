from __future__ import annotations

import re

from pymongo import ReturnDocument
from pymongo.database import Database

from ..models.order import Order, OrderFilter, OrderStatus
from .documents.order_document import OrderDocument
from .interfaces import OrderRepositoryInterface
from .mongo_errors import translate_store_errors


class OrderRepository(OrderRepositoryInterface):
    """orders 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["orders"]

    @staticmethod
    def _from_document(doc: dict) -> Order:
        return OrderDocument.model_validate(doc).to_domain()

    def insert(self, order: Order) -> Order:
        document = OrderDocument.from_domain(order)
        payload = document.to_mongo_record()
        with translate_store_errors("insert order"):
            result = self._col.insert_one(payload)
        payload["_id"] = result.inserted_id
        return self._from_document(payload)

    def find_by_order_id(self, order_id: str) -> Order | None:
        doc = self._col.find_one({"order_id": order_id})
        if not doc:
            return None
        return self._from_document(doc)

    def find_by_idempotency_key(self, photographer_uid: str, key: str) -> Order | None:
        doc = self._col.find_one(
            {"photographer_uid": photographer_uid, "idempotency_key": key}
        )
        if not doc:
            return None
        return self._from_document(doc)

    def list_by_photographer(self, photographer_uid: str) -> list[Order]:
        cursor = self._col.find(
            {"photographer_uid": photographer_uid},
            sort=[("created_at", -1), ("_id", -1)],
        )
        return [self._from_document(doc) for doc in cursor]

    def list(self, flt: OrderFilter) -> tuple[list[Order], int]:
        page = flt.page if flt.page > 0 else 1
        page_size = flt.page_size if 0 < flt.page_size <= 100 else 20

        query: dict = {}
        if flt.status is not None:
            query["status"] = str(flt.status)
        if flt.model_id:
            query["model_id"] = flt.model_id
        if flt.photographer_id:
            query["photographer_id"] = flt.photographer_id
        if flt.search and flt.search.strip():
            pattern = {"$regex": re.escape(flt.search.strip()), "$options": "i"}
            query["$or"] = [
                {"order_id": pattern},
                {"buyer_name": pattern},
                {"buyer_phone": pattern},
                {"photographer_name": pattern},
            ]

        total = self._col.count_documents(query)
        cursor = self._col.find(
            query,
            sort=[("created_at", -1), ("_id", -1)],
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return [self._from_document(doc) for doc in cursor], total

    def save_status(self, order: Order) -> Order | None:
        doc = self._col.find_one_and_update(
            {"order_id": order.order_id},
            {
                "$set": {
                    "status": str(order.status),
                    "admin_comments": order.admin_comments,
                    "updated_at": order.updated_at,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._from_document(doc)

    def count_by_status(self) -> dict[OrderStatus, int]:
        counts = {status: 0 for status in OrderStatus}
        pipeline = [{"$group": {"_id": "$status", "count": {"$sum": 1}}}]
        for doc in self._col.aggregate(pipeline):
            try:
                counts[OrderStatus(doc["_id"])] = int(doc["count"])
            except ValueError:
                # 알 수 없는 상태 값은 집계에서 제외
                continue
        return counts

    def list_all(self) -> list[Order]:
        cursor = self._col.find({}, sort=[("created_at", 1), ("_id", 1)])
        return [self._from_document(doc) for doc in cursor]
