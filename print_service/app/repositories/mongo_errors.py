"""pymongo 예외를 도메인 예외로 변환하는 헬퍼."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from pymongo.errors import ConnectionFailure, DuplicateKeyError, OperationFailure

from ..errors import ConflictError, TransientStoreError


# WriteConflict
WRITE_CONFLICT_CODE = 112

TRANSIENT_LABELS = ("TransientTransactionError", "UnknownTransactionCommitResult")


def is_transient(exc: Exception) -> bool:
    if isinstance(exc, ConnectionFailure):
        return True
    if isinstance(exc, OperationFailure):
        if exc.code == WRITE_CONFLICT_CODE:
            return True
        return any(exc.has_error_label(label) for label in TRANSIENT_LABELS)
    return False


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """일시적 오류는 TransientStoreError, 유니크 제약 위반은 ConflictError 로 바꾼다.

    그 밖의 pymongo 예외는 그대로 전파한다.
    """

    try:
        yield
    except DuplicateKeyError as exc:
        raise ConflictError(f"{operation}: duplicate key") from exc
    except (ConnectionFailure, OperationFailure) as exc:
        if is_transient(exc):
            raise TransientStoreError(f"{operation}: {exc}") from exc
        raise
