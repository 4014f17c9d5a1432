from __future__ import annotations

import re
from datetime import datetime, timezone

from pymongo import ReturnDocument
from pymongo.database import Database

from ..models.photographer import BankDetails, Photographer
from .documents.photographer_document import PhotographerDocument
from .interfaces import PhotographerRepositoryInterface
from .mongo_errors import translate_store_errors


class PhotographerRepository(PhotographerRepositoryInterface):
    """photographers 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["photographers"]

    @staticmethod
    def _from_document(doc: dict) -> Photographer:
        return PhotographerDocument.model_validate(doc).to_domain()

    def find_by_uid(self, uid: str) -> Photographer | None:
        doc = self._col.find_one({"_id": uid})
        if not doc:
            return None
        return self._from_document(doc)

    def insert(self, photographer: Photographer) -> Photographer:
        document = PhotographerDocument.from_domain(photographer)
        payload = document.to_mongo_record()
        with translate_store_errors("insert photographer"):
            self._col.insert_one(payload)
        return self._from_document(payload)

    def update_profile(
        self, uid: str, display_name: str, email: str, phone_number: str
    ) -> Photographer | None:
        now = datetime.now(timezone.utc)
        doc = self._col.find_one_and_update(
            {"_id": uid},
            {
                "$set": {
                    "display_name": display_name,
                    "email": email,
                    "phone_number": phone_number,
                    "updated_at": now,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._from_document(doc)

    def update_bank_details(
        self, uid: str, bank_details: BankDetails
    ) -> Photographer | None:
        now = datetime.now(timezone.utc)
        doc = self._col.find_one_and_update(
            {"_id": uid},
            {"$set": {"bank_details": bank_details.model_dump(), "updated_at": now}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._from_document(doc)

    def list(
        self, search: str | None, page: int, page_size: int
    ) -> tuple[list[Photographer], int]:
        if page <= 0:
            page = 1
        if page_size <= 0 or page_size > 100:
            page_size = 20

        query: dict = {}
        if search and search.strip():
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            query["$or"] = [
                {"display_name": pattern},
                {"email": pattern},
                {"photographer_id": pattern},
            ]

        total = self._col.count_documents(query)
        cursor = self._col.find(
            query,
            sort=[("photographer_id", 1)],
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return [self._from_document(doc) for doc in cursor], total

    def list_all(self) -> list[Photographer]:
        cursor = self._col.find({}, sort=[("photographer_id", 1)])
        return [self._from_document(doc) for doc in cursor]
