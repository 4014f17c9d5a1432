"""정산 원본 데이터를 일관된 스냅샷으로 읽고, 정산 요청을 트랜잭션 안에서 만든다.

정산 요청 접수는 "잔액 재계산 -> 검증 -> insert" 를 하나의 멀티 도큐먼트 트랜잭션으로 묶는다.
스냅샷 격리만으로는 서로 다른 요청 도큐먼트를 insert 하는 두 트랜잭션이 동시에 커밋될 수 있으므로
(write skew), 트랜잭션 시작 시 포토그래퍼 도큐먼트의 redeem_guard 를 증가시켜 같은 포토그래퍼에 대한
동시 접수가 WriteConflict 로 충돌하도록 만든다. 충돌한 쪽은 TransientStoreError 로 올라가고
서비스 레이어에서 재시도한다.
"""

from __future__ import annotations

import logging
from typing import Callable

from pymongo import ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.database import Database
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from common.mongo.config import get_max_commit_time_ms

from ..errors import NotFoundError
from ..models.earnings import LedgerSnapshot
from ..models.photographer import Photographer
from ..models.redeem import RedeemRequest
from .documents.adjustment_document import ManualAdjustmentDocument
from .documents.order_document import OrderDocument
from .documents.photographer_document import PhotographerDocument
from .documents.redeem_document import RedeemRequestDocument
from .interfaces import LedgerStoreInterface
from .mongo_errors import translate_store_errors


logger = logging.getLogger(__name__)


class MongoLedgerStore(LedgerStoreInterface):
    def __init__(self, database: Database) -> None:
        self._db = database
        self._client = database.client
        self._photographers = database["photographers"]
        self._orders = database["orders"]
        self._adjustments = database["manual_adjustments"]
        self._redeems = database["redeem_requests"]

    def load_snapshot(
        self, photographer_uid: str, *, session: ClientSession | None = None
    ) -> LedgerSnapshot:
        query = {"photographer_uid": photographer_uid}
        orders = [
            OrderDocument.model_validate(doc).to_domain()
            for doc in self._orders.find(
                query, sort=[("created_at", 1), ("_id", 1)], session=session
            )
        ]
        adjustments = [
            ManualAdjustmentDocument.model_validate(doc).to_domain()
            for doc in self._adjustments.find(
                query, sort=[("created_at", 1), ("_id", 1)], session=session
            )
        ]
        redeems = [
            RedeemRequestDocument.model_validate(doc).to_domain()
            for doc in self._redeems.find(
                query, sort=[("requested_at", 1), ("_id", 1)], session=session
            )
        ]
        return LedgerSnapshot(orders=orders, adjustments=adjustments, redeems=redeems)

    def submit_redeem(
        self,
        photographer_uid: str,
        idempotency_key: str | None,
        decide: Callable[[Photographer, LedgerSnapshot], RedeemRequest],
    ) -> tuple[RedeemRequest, bool]:
        with translate_store_errors("submit redeem"):
            with self._client.start_session() as session:
                with session.start_transaction(
                    read_concern=ReadConcern("snapshot"),
                    write_concern=WriteConcern("majority"),
                    max_commit_time_ms=get_max_commit_time_ms(),
                ):
                    return self._submit_in_transaction(
                        session, photographer_uid, idempotency_key, decide
                    )

    def _submit_in_transaction(
        self,
        session: ClientSession,
        photographer_uid: str,
        idempotency_key: str | None,
        decide: Callable[[Photographer, LedgerSnapshot], RedeemRequest],
    ) -> tuple[RedeemRequest, bool]:
        photographer_doc = self._photographers.find_one_and_update(
            {"_id": photographer_uid},
            {"$inc": {"redeem_guard": 1}},
            return_document=ReturnDocument.AFTER,
            session=session,
        )
        if not photographer_doc:
            raise NotFoundError(f"photographer not found: {photographer_uid}")

        if idempotency_key:
            existing = self._redeems.find_one(
                {"photographer_uid": photographer_uid, "idempotency_key": idempotency_key},
                session=session,
            )
            if existing:
                logger.info(
                    "redeem request replayed by idempotency key",
                    extra={"photographer_uid": photographer_uid},
                )
                return RedeemRequestDocument.model_validate(existing).to_domain(), False

        photographer = PhotographerDocument.model_validate(photographer_doc).to_domain()
        snapshot = self.load_snapshot(photographer_uid, session=session)
        request = decide(photographer, snapshot)

        payload = RedeemRequestDocument.from_domain(request).to_mongo_record()
        result = self._redeems.insert_one(payload, session=session)
        return request.model_copy(update={"id": str(result.inserted_id)}), True
