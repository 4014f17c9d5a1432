from __future__ import annotations

from fastapi import HTTPException, status

from ..errors import (
    AllocationFailed,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    PrintDeskError,
    TransientStoreError,
    ValidationError,
)


_STATUS_BY_ERROR: list[tuple[type[PrintDeskError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AllocationFailed, status.HTTP_503_SERVICE_UNAVAILABLE),
    (TransientStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http_exception(exc: PrintDeskError) -> HTTPException:
    """도메인 예외를 HTTPException 으로 바꾼다. 메시지는 사용자에게 그대로 노출된다."""

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
