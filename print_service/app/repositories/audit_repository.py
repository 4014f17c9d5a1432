from __future__ import annotations

from pymongo.database import Database

from ..errors import ConflictError
from .interfaces import AuditRepositoryInterface
from .mongo_errors import translate_store_errors


class AuditRepository(AuditRepositoryInterface):
    """ledger_audit 컬렉션. 이벤트 한 건당 도큐먼트 한 개, 수정하지 않는다."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["ledger_audit"]

    def append(self, entry: dict) -> bool:
        try:
            with translate_store_errors("append audit entry"):
                self._col.insert_one(dict(entry))
        except ConflictError:
            # 재전달된 이벤트 (event_id 유니크 인덱스)
            return False
        return True
