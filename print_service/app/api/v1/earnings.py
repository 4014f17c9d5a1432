from __future__ import annotations

import logging
import queue
from typing import Iterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pymongo.database import Database

from common.mongo.client import get_database

from ...config import AppConfig, get_config
from ...errors import PrintDeskError
from ...ledger.engine import LedgerEngine
from ...listeners.earnings_watcher import (
    ChangeFeedInterface,
    EarningsWatcher,
    MongoChangeFeed,
)
from ...models.earnings import EarningsSummary
from ...models.photographer import Actor
from ...repositories.interfaces import LedgerStoreInterface
from ...services.earnings_service import EarningsService, get_earnings_service
from ...services.redeem_service import get_ledger_store
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.earnings import (
    EarningsSummaryResponse,
    LedgerTransactionResponse,
    PhotographerEarningsResponse,
    StatementResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter()

# 클라이언트 연결 끊김을 감지하기 위한 keep-alive 주기(초)
KEEPALIVE_SECONDS = 15.0


def get_change_feed(db: Database = Depends(get_database)) -> ChangeFeedInterface:
    return MongoChangeFeed(db)


@router.get(
    "",
    response_model=list[PhotographerEarningsResponse],
    summary="전체 포토그래퍼 잔액 (관리자)",
)
def admin_overview(
    actor: Actor = Depends(get_actor),
    service: EarningsService = Depends(get_earnings_service),
) -> list[PhotographerEarningsResponse]:
    try:
        items = service.admin_overview(actor)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return [PhotographerEarningsResponse.from_domain(item) for item in items]


@router.get(
    "/{photographer_uid}",
    response_model=EarningsSummaryResponse,
    summary="잔액 요약",
)
def get_summary(
    photographer_uid: str,
    actor: Actor = Depends(get_actor),
    service: EarningsService = Depends(get_earnings_service),
) -> EarningsSummaryResponse:
    try:
        summary = service.get_summary(actor, photographer_uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return EarningsSummaryResponse.from_domain(summary)


@router.get(
    "/{photographer_uid}/statement",
    response_model=StatementResponse,
    summary="정산 명세서 (최신순)",
)
def get_statement(
    photographer_uid: str,
    actor: Actor = Depends(get_actor),
    service: EarningsService = Depends(get_earnings_service),
) -> StatementResponse:
    try:
        entries = service.get_statement(actor, photographer_uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return StatementResponse(
        items=[LedgerTransactionResponse.from_domain(e) for e in entries]
    )


@router.get("/{photographer_uid}/stream", summary="잔액 실시간 스트림 (SSE)")
def stream_summary(
    photographer_uid: str,
    actor: Actor = Depends(get_actor),
    service: EarningsService = Depends(get_earnings_service),
    store: LedgerStoreInterface = Depends(get_ledger_store),
    feed: ChangeFeedInterface = Depends(get_change_feed),
    config: AppConfig = Depends(get_config),
) -> StreamingResponse:
    # 권한/존재 여부는 스트림을 열기 전에 확인한다.
    try:
        service.get_summary(actor, photographer_uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc

    updates: queue.Queue[EarningsSummary] = queue.Queue()
    watcher = EarningsWatcher(
        photographer_uid,
        store,
        LedgerEngine(config.earnings),
        feed,
        updates.put,
    )

    def generate() -> Iterator[str]:
        watcher.start()
        try:
            while True:
                try:
                    summary = updates.get(timeout=KEEPALIVE_SECONDS)
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue
                body = EarningsSummaryResponse.from_domain(summary).model_dump_json()
                yield f"event: earnings\ndata: {body}\n\n"
        finally:
            watcher.close()
            logger.info(
                "earnings stream closed", extra={"photographer_uid": photographer_uid}
            )

    return StreamingResponse(generate(), media_type="text/event-stream")
