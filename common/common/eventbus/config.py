from __future__ import annotations

import os


def get_brokers() -> str:
    value = os.getenv("KAFKA_BOOTSTRAP_SERVERS")
    if not value:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS environment variable is required")
    return value


def get_group_id() -> str:
    value = os.getenv("KAFKA_GROUP_ID")
    if not value:
        raise RuntimeError("KAFKA_GROUP_ID environment variable is required")
    return value


def is_publishing_enabled() -> bool:
    """이벤트 발행 여부.

    KAFKA_BOOTSTRAP_SERVERS 가 비어 있으면 로컬 개발 환경으로 보고 발행을 건너뛴다.
    KAFKA_PUBLISH_ENABLED=false 로 명시적으로 끌 수도 있다.
    """

    if not os.getenv("KAFKA_BOOTSTRAP_SERVERS", "").strip():
        return False
    raw_value = os.getenv("KAFKA_PUBLISH_ENABLED", "true").strip().lower()
    return raw_value not in {"0", "false", "no", "off"}
