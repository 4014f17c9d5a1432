from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# 감사(audit) 로그 적재는 빠르게 따라잡아야 하므로 재시도 간격을 짧게 유지한다.
RetryDelays: list[float] = [
    10.0,
    60.0,
    300.0,
    900.0,
]


class MaxRetryExceededError(Exception):
    """최대 재시도 횟수를 초과한 경우 사용되는 예외."""


@dataclass(slots=True)
class Event:
    """Kafka 메시지의 메타데이터와 페이로드를 표현하는 이벤트.

    payload는 직렬화 직전/직후 형태(dict)를 저장하고, 실제 Kafka I/O 레이어에서
    JSON 인코딩/디코딩을 담당한다. key 는 파티션 키로 사용되며, 같은 포토그래퍼의
    이벤트가 한 파티션에서 순서대로 처리되도록 photographer_uid 를 넣는다.
    """

    id: str
    payload: Any
    key: str | None = None
    retry: int = 0
    max_retry: int = 0
    last_error: str | None = None

    def __post_init__(self) -> None:
        if self.max_retry <= 0 or self.max_retry > len(RetryDelays):
            self.max_retry = len(RetryDelays)


@dataclass(frozen=True, slots=True)
class Topic:
    base: str

    def dlq(self) -> str:
        return f"{self.base}.dlq"

    def get_retry_topics(self) -> list[str]:
        return [
            f"{self.base}.retry.{index}" for index in range(1, len(RetryDelays) + 1)
        ]

    def get_retry_topic(self, retry_count: int) -> str:
        if retry_count <= 0 or retry_count > len(RetryDelays):
            raise MaxRetryExceededError()
        return f"{self.base}.retry.{retry_count}"
