from __future__ import annotations

import pytest
from pymongo.errors import AutoReconnect, DuplicateKeyError, OperationFailure

from print_service.app.errors import ConflictError, TransientStoreError
from print_service.app.repositories.mongo_errors import translate_store_errors


def _raise(exc: Exception) -> None:
    with translate_store_errors("test op"):
        raise exc


def test_duplicate_key_becomes_conflict() -> None:
    with pytest.raises(ConflictError):
        _raise(DuplicateKeyError("E11000 duplicate key", code=11000))


def test_write_conflict_is_transient() -> None:
    with pytest.raises(TransientStoreError):
        _raise(OperationFailure("WriteConflict", code=112))


def test_transient_transaction_label_is_transient() -> None:
    failure = OperationFailure(
        "commit failed", code=251, details={"errorLabels": ["TransientTransactionError"]}
    )

    with pytest.raises(TransientStoreError):
        _raise(failure)


def test_connection_loss_is_transient() -> None:
    with pytest.raises(TransientStoreError):
        _raise(AutoReconnect("primary stepped down"))


def test_other_operation_failures_propagate() -> None:
    with pytest.raises(OperationFailure):
        _raise(OperationFailure("bad query", code=2))
