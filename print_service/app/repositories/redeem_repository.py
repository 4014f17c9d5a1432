from __future__ import annotations

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from ..models.redeem import RedeemRequest, RedeemStatus
from .documents.redeem_document import RedeemRequestDocument
from .interfaces import RedeemRepositoryInterface
from .mongo_errors import translate_store_errors


class RedeemRepository(RedeemRepositoryInterface):
    """redeem_requests 컬렉션에 대한 MongoDB 접근 레이어.

    신규 요청 생성은 잔액 검증과 함께 LedgerStore 트랜잭션에서만 한다.
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["redeem_requests"]

    @staticmethod
    def _from_document(doc: dict) -> RedeemRequest:
        return RedeemRequestDocument.model_validate(doc).to_domain()

    def find_by_id(self, id_value: str) -> RedeemRequest | None:
        if not ObjectId.is_valid(id_value):
            return None
        doc = self._col.find_one({"_id": ObjectId(id_value)})
        if not doc:
            return None
        return self._from_document(doc)

    def list_by_photographer(self, photographer_uid: str) -> list[RedeemRequest]:
        cursor = self._col.find(
            {"photographer_uid": photographer_uid},
            sort=[("requested_at", -1), ("_id", -1)],
        )
        return [self._from_document(doc) for doc in cursor]

    def list_by_status(
        self, status: RedeemStatus, page: int, page_size: int
    ) -> tuple[list[RedeemRequest], int]:
        if page <= 0:
            page = 1
        if page_size <= 0 or page_size > 100:
            page_size = 20

        query = {"status": str(status)}
        total = self._col.count_documents(query)
        cursor = self._col.find(
            query,
            sort=[("requested_at", -1), ("_id", -1)],
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return [self._from_document(doc) for doc in cursor], total

    def count_by_status(self, status: RedeemStatus) -> int:
        return self._col.count_documents({"status": str(status)})

    def apply_resolution(self, resolved: RedeemRequest) -> RedeemRequest | None:
        if resolved.id is None or not ObjectId.is_valid(resolved.id):
            return None
        # pending 조건부 업데이트: 동시에 두 번 처리해도 한쪽만 반영된다.
        with translate_store_errors("resolve redeem"):
            doc = self._col.find_one_and_update(
                {"_id": ObjectId(resolved.id), "status": str(RedeemStatus.PENDING)},
                {
                    "$set": {
                        "status": str(resolved.status),
                        "amount_paid": resolved.amount_paid,
                        "remarks": resolved.remarks,
                        "processed_at": resolved.processed_at,
                        "processed_by": resolved.processed_by,
                        "resolution_key": resolved.resolution_key,
                        "updated_at": resolved.processed_at,
                    }
                },
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            return None
        return self._from_document(doc)

    def list_all(self) -> list[RedeemRequest]:
        cursor = self._col.find({}, sort=[("requested_at", 1), ("_id", 1)])
        return [self._from_document(doc) for doc in cursor]
