"""사람이 읽는 순번 식별자 발급기.

- 포토그래퍼 코드: 이름 앞 4글자(대문자) + 전역 카운터 3자리 (예: JOHN001)
- 주문 번호: "{photographer_id}_{포토그래퍼별 카운터 3자리}" (예: JOHN001_007)

유일성은 저장소의 단일 도큐먼트 원자적 증가($inc)에 전적으로 기대며, 이 모듈이 직접 보장하지
않는다. 모든 호출자가 같은 카운터 도큐먼트를 거쳐야 한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database

from ..config import AppConfig, RetryPolicy, get_config
from ..errors import AllocationFailed, NotFoundError, ValidationError
from ..repositories.counter_repository import CounterRepository
from ..repositories.interfaces import CounterRepositoryInterface
from .retry import run_with_retry


logger = logging.getLogger(__name__)

PREFIX_LENGTH = 4
SEQUENCE_WIDTH = 3


@dataclass(slots=True, frozen=True)
class OrderIdAllocation:
    photographer_id: str
    sequence: int
    order_id: str


def zero_pad(value: int, width: int = SEQUENCE_WIDTH) -> str:
    # 자릿수를 넘으면 자르지 않고 그대로 늘어난다 (1000 -> "1000").
    return str(value).zfill(width)


def name_prefix(name: str) -> str:
    # 공백도 글자로 센다 ("Jo Smith" -> "JO S"). 앞뒤 공백만 제거한다.
    text = name.strip()
    if not text:
        raise ValidationError("Name is required to derive a photographer ID.")
    return text[:PREFIX_LENGTH].upper()


def format_order_id(photographer_id: str, sequence: int) -> str:
    return f"{photographer_id}_{zero_pad(sequence)}"


class IdentifierAllocator:
    def __init__(
        self,
        counter_repo: CounterRepositoryInterface,
        retry: RetryPolicy,
        *,
        fixed_prefix: str | None = None,
    ) -> None:
        self._counter_repo = counter_repo
        self._retry = retry
        self._fixed_prefix = fixed_prefix

    def allocate_photographer_id(self, name: str) -> str:
        """새 포토그래퍼 코드를 발급한다. 재시도가 소진되면 AllocationFailed."""

        prefix = self._fixed_prefix or name_prefix(name)
        count = run_with_retry(
            self._counter_repo.increment_photographer_counter,
            self._retry,
            name="photographer id allocation",
            exhausted=AllocationFailed,
        )
        photographer_id = f"{prefix}{zero_pad(count)}"
        logger.info(
            "allocated photographer id",
            extra={"photographer_id": photographer_id},
        )
        return photographer_id

    def allocate_order_id(self, photographer_uid: str) -> OrderIdAllocation:
        """포토그래퍼의 다음 주문 번호를 발급한다.

        포토그래퍼 도큐먼트가 없으면 재시도 없이 NotFoundError.
        """

        result = run_with_retry(
            lambda: self._counter_repo.increment_order_counter(photographer_uid),
            self._retry,
            name="order id allocation",
            exhausted=AllocationFailed,
        )
        if result is None:
            raise NotFoundError(f"photographer not found: {photographer_uid}")

        photographer_id, sequence = result
        allocation = OrderIdAllocation(
            photographer_id=photographer_id,
            sequence=sequence,
            order_id=format_order_id(photographer_id, sequence),
        )
        logger.info(
            "allocated order id",
            extra={"photographer_uid": photographer_uid, "order_id": allocation.order_id},
        )
        return allocation


def get_counter_repository(
    db: Database = Depends(get_database),
) -> CounterRepositoryInterface:
    """FastAPI DI용 CounterRepository 팩토리."""

    return CounterRepository(db)


def get_identifier_allocator(
    counter_repo: CounterRepositoryInterface = Depends(get_counter_repository),
    config: AppConfig = Depends(get_config),
) -> IdentifierAllocator:
    return IdentifierAllocator(
        counter_repo,
        config.retry,
        fixed_prefix=config.photographer_id_prefix,
    )
