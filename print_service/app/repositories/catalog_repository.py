from __future__ import annotations

from bson import ObjectId
from pymongo.database import Database

from ..models.catalog import CatalogModel
from .documents.catalog_document import CatalogModelDocument
from .interfaces import CatalogRepositoryInterface


class CatalogRepository(CatalogRepositoryInterface):
    """models 컬렉션 (주문 가능한 3D 모델 카탈로그)."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["models"]

    @staticmethod
    def _from_document(doc: dict) -> CatalogModel:
        return CatalogModelDocument.model_validate(doc).to_domain()

    def list(self) -> list[CatalogModel]:
        cursor = self._col.find({}, sort=[("model_name", 1), ("_id", 1)])
        return [self._from_document(doc) for doc in cursor]

    def find_by_id(self, id_value: str) -> CatalogModel | None:
        if not ObjectId.is_valid(id_value):
            return None
        doc = self._col.find_one({"_id": ObjectId(id_value)})
        if not doc:
            return None
        return self._from_document(doc)

    def insert(self, model: CatalogModel) -> CatalogModel:
        payload = CatalogModelDocument.from_domain(model).to_mongo_record()
        result = self._col.insert_one(payload)
        payload["_id"] = result.inserted_id
        return self._from_document(payload)

    def delete(self, id_value: str) -> bool:
        if not ObjectId.is_valid(id_value):
            return False
        result = self._col.delete_one({"_id": ObjectId(id_value)})
        return result.deleted_count == 1
