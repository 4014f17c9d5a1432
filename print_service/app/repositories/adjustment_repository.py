from __future__ import annotations

from pymongo.database import Database

from ..models.adjustment import ManualAdjustment
from .documents.adjustment_document import ManualAdjustmentDocument
from .interfaces import AdjustmentRepositoryInterface


class AdjustmentRepository(AdjustmentRepositoryInterface):
    """manual_adjustments 컬렉션 (append-only)."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["manual_adjustments"]

    @staticmethod
    def _from_document(doc: dict) -> ManualAdjustment:
        return ManualAdjustmentDocument.model_validate(doc).to_domain()

    def insert(self, adjustment: ManualAdjustment) -> ManualAdjustment:
        payload = ManualAdjustmentDocument.from_domain(adjustment).to_mongo_record()
        result = self._col.insert_one(payload)
        payload["_id"] = result.inserted_id
        return self._from_document(payload)

    def list_by_photographer(self, photographer_uid: str) -> list[ManualAdjustment]:
        cursor = self._col.find(
            {"photographer_uid": photographer_uid},
            sort=[("created_at", 1), ("_id", 1)],
        )
        return [self._from_document(doc) for doc in cursor]

    def list_all(self) -> list[ManualAdjustment]:
        cursor = self._col.find({}, sort=[("created_at", 1), ("_id", 1)])
        return [self._from_document(doc) for doc in cursor]
