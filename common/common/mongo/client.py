from __future__ import annotations

import logging
import threading
from typing import Optional, cast

from pymongo import MongoClient
from pymongo.database import Database

from .config import get_mongo_db_name, get_mongo_uri
from .types import build_type_registry


logger = logging.getLogger(__name__)


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def get_client() -> MongoClient:
    """전역 MongoClient 싱글톤을 반환한다.

    - MONGO_URI 에서 URI 를 읽어온다.
    - Decimal <-> Decimal128 코덱을 등록한다.
    - ping 으로 연결을 검증한다.
    - URI 에 기본 데이터베이스가 포함되어 있지 않으면 에러를 발생시킨다.
    - 정산에 필요한 인덱스를 한 번만 생성한다.
    """

    global _client, _db

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        uri = get_mongo_uri()
        client: MongoClient = MongoClient(
            uri,
            type_registry=build_type_registry(),
            tz_aware=True,
        )

        try:
            client.admin.command("ping")
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

        # 사용할 DB 이름 결정: MONGO_DB_NAME 우선, 없으면 URI의 기본 DB 사용
        db_name = get_mongo_db_name()
        try:
            if db_name:
                db = client[db_name]
            else:
                db = client.get_default_database()
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(
                "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
            ) from exc

        _client = client
        _db = db

        try:
            _ensure_indexes(_db)
        except Exception as exc:  # noqa: BLE001
            # 인덱스 생성 실패는 치명적 오류로 간주한다.
            logger.error("failed to ensure MongoDB indexes: %s", exc)
            raise

        safe_db = cast(Database, _db)
        logger.info("MongoDB connected and indexes ensured (db=%s)", safe_db.name)
        return _client


def get_database() -> Database:
    """전역 기본 Database 객체를 반환한다."""

    global _db

    if _db is None:
        get_client()
    assert (
        _db is not None
    )  # get_client 에서 _db 를 초기화하지 못했다면 예외가 이미 발생했어야 한다.
    return _db


def close_client() -> None:
    """애플리케이션 종료 시 전역 클라이언트를 닫는다."""

    global _client, _db

    with _lock:
        if _client is not None:
            _client.close()
        _client = None
        _db = None


def _ensure_indexes(db: Database) -> None:
    """필수 인덱스를 생성한다.

    중복 생성해도 MongoDB 가 처리하므로 idempotent 하다.
    멱등성 키 인덱스는 키가 문자열인 도큐먼트에만 적용되는 partial unique 인덱스다.
    """

    photographers = db["photographers"]

    photographers.create_index(
        [("photographer_id", 1)],
        name="uniq_photographer_id",
        unique=True,
    )

    photographers.create_index(
        [("email", 1)],
        name="idx_email",
    )

    orders = db["orders"]

    # 포토그래퍼별 주문 목록 (최신순)
    orders.create_index(
        [("photographer_uid", 1), ("created_at", -1)],
        name="idx_photographer_created_at",
    )

    orders.create_index(
        [("order_id", 1)],
        name="uniq_order_id",
        unique=True,
    )

    orders.create_index(
        [("status", 1), ("created_at", -1)],
        name="idx_status_created_at",
    )

    orders.create_index(
        [("photographer_uid", 1), ("idempotency_key", 1)],
        name="uniq_order_idempotency_key",
        unique=True,
        partialFilterExpression={"idempotency_key": {"$type": "string"}},
    )

    adjustments = db["manual_adjustments"]

    adjustments.create_index(
        [("photographer_uid", 1), ("created_at", -1)],
        name="idx_photographer_created_at",
    )

    redeems = db["redeem_requests"]

    redeems.create_index(
        [("photographer_uid", 1), ("requested_at", -1)],
        name="idx_photographer_requested_at",
    )

    redeems.create_index(
        [("status", 1), ("requested_at", -1)],
        name="idx_status_requested_at",
    )

    redeems.create_index(
        [("photographer_uid", 1), ("idempotency_key", 1)],
        name="uniq_redeem_idempotency_key",
        unique=True,
        partialFilterExpression={"idempotency_key": {"$type": "string"}},
    )

    audit = db["ledger_audit"]

    audit.create_index(
        [("event_id", 1)],
        name="uniq_event_id",
        unique=True,
    )

    audit.create_index(
        [("photographer_uid", 1), ("occurred_at", -1)],
        name="idx_photographer_occurred_at",
    )
