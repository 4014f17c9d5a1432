from __future__ import annotations

import pytest

from print_service.app.config import RetryPolicy
from print_service.app.errors import AllocationFailed, NotFoundError, TransientStoreError
from print_service.app.services.retry import run_with_retry


class _Flaky:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientStoreError("conflict")
        return "ok"


def test_backoff_doubles_between_attempts() -> None:
    sleeps: list[float] = []
    op = _Flaky(failures=3)

    result = run_with_retry(
        op,
        RetryPolicy(max_attempts=5, base_delay=0.1, timeout=10.0),
        name="op",
        exhausted=AllocationFailed,
        sleep=sleeps.append,
    )

    assert result == "ok"
    assert sleeps == [0.1, 0.2, 0.4]


def test_timeout_budget_stops_retrying() -> None:
    now = [0.0]

    def clock() -> float:
        return now[0]

    def sleep(delay: float) -> None:
        now[0] += delay

    op = _Flaky(failures=100)

    with pytest.raises(AllocationFailed, match="budget"):
        run_with_retry(
            op,
            RetryPolicy(max_attempts=100, base_delay=1.0, timeout=5.0),
            name="op",
            exhausted=AllocationFailed,
            sleep=sleep,
            clock=clock,
        )

    # 1 + 2 초를 기다린 뒤, 다음 4초 대기가 예산을 넘어 포기한다.
    assert op.calls == 3


def test_non_transient_errors_are_not_retried() -> None:
    calls = []

    def op() -> None:
        calls.append(1)
        raise NotFoundError("gone")

    with pytest.raises(NotFoundError):
        run_with_retry(op, RetryPolicy(base_delay=0.0), name="op", exhausted=AllocationFailed)

    assert len(calls) == 1


def test_exhausted_error_keeps_cause() -> None:
    with pytest.raises(TransientStoreError) as info:
        run_with_retry(
            _Flaky(failures=10),
            RetryPolicy(max_attempts=2, base_delay=0.0),
            name="redeem",
            exhausted=TransientStoreError,
        )

    assert isinstance(info.value.__cause__, TransientStoreError)
