"""일시적 저장소 오류에 대한 제한된 지수 백오프 재시도."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from ..config import RetryPolicy
from ..errors import PrintDeskError, TransientStoreError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    name: str,
    exhausted: Callable[[str], PrintDeskError],
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """operation 을 실행하고 TransientStoreError 가 나면 백오프 후 다시 시도한다.

    - 총 시도 횟수는 policy.max_attempts 를 넘지 않는다.
    - 다음 대기가 policy.timeout 예산을 넘기면 더 기다리지 않고 포기한다.
    - 포기할 때는 exhausted(메시지) 로 만든 예외를 마지막 원인과 함께 던진다.

    TransientStoreError 가 아닌 예외(NotFoundError, ValidationError 등)는 재시도하지 않는다.
    """

    deadline = clock() + policy.timeout
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except TransientStoreError as exc:
            if attempt >= policy.max_attempts:
                raise exhausted(
                    f"{name} did not commit after {attempt} attempts"
                ) from exc

            delay = policy.delay_for(attempt)
            if clock() + delay > deadline:
                raise exhausted(
                    f"{name} exceeded retry budget of {policy.timeout}s"
                ) from exc

            logger.warning(
                "%s hit a transient store error, retrying in %.3fs: %s",
                name,
                delay,
                exc,
                extra={"attempt": attempt},
            )
            sleep(delay)
