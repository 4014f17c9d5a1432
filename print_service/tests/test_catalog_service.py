from __future__ import annotations

import pytest

from print_service.app.errors import NotFoundError, PermissionDeniedError, ValidationError
from print_service.app.models.order import PhotoUpload
from print_service.app.services.catalog_service import CatalogService

from print_service.tests.fakes import (
    ADMIN,
    FakeCatalogRepository,
    FakePhotoStorage,
    actor_for,
)


def _service() -> tuple[CatalogService, FakeCatalogRepository, FakePhotoStorage]:
    repo = FakeCatalogRepository()
    storage = FakePhotoStorage()
    return CatalogService(repo, storage), repo, storage


def test_add_model_with_image() -> None:
    service, repo, storage = _service()

    model = service.add(
        ADMIN,
        " Bust ",
        "head and shoulders",
        PhotoUpload(filename="bust.png", content_type="image/png", data=b"png"),
    )

    assert model.model_name == "Bust"
    assert model.image_url == "/api/v1/photos/file1"
    assert service.list() == [model]
    assert "file1" in storage.files


def test_add_requires_admin_and_name() -> None:
    service, _, _ = _service()

    with pytest.raises(PermissionDeniedError):
        service.add(actor_for(), "Bust")
    with pytest.raises(ValidationError):
        service.add(ADMIN, "  ")


def test_delete_removes_image() -> None:
    service, repo, storage = _service()
    model = service.add(
        ADMIN, "Bust", image=PhotoUpload(filename="b.png", data=b"x")
    )

    service.delete(ADMIN, model.id)

    assert repo.items == {}
    assert storage.deleted == ["/api/v1/photos/file1"]
    with pytest.raises(NotFoundError):
        service.get(model.id)


def test_delete_survives_image_cleanup_failure() -> None:
    service, repo, storage = _service()
    model = service.add(ADMIN, "Bust", image=PhotoUpload(filename="b.png", data=b"x"))
    storage.fail_on_delete = True

    service.delete(ADMIN, model.id)

    assert repo.items == {}
