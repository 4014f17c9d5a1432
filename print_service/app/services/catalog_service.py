from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database

from ..config import AppConfig, get_config
from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from ..models.catalog import CatalogModel
from ..models.order import PhotoUpload
from ..models.photographer import Actor
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.interfaces import CatalogRepositoryInterface, PhotoStorageInterface
from ..repositories.photo_storage import GridFSPhotoStorage


logger = logging.getLogger(__name__)


class CatalogService:
    """3D 모델 카탈로그 관리. 목록 조회는 누구나, 추가/삭제는 관리자만."""

    def __init__(
        self, repo: CatalogRepositoryInterface, storage: PhotoStorageInterface
    ) -> None:
        self._repo = repo
        self._storage = storage

    def list(self) -> list[CatalogModel]:
        return self._repo.list()

    def get(self, model_id: str) -> CatalogModel:
        model = self._repo.find_by_id(model_id)
        if model is None:
            raise NotFoundError(f"model not found: {model_id}")
        return model

    def add(
        self,
        actor: Actor,
        model_name: str,
        model_description: str = "",
        image: PhotoUpload | None = None,
    ) -> CatalogModel:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can add models")
        name = (model_name or "").strip()
        if not name:
            raise ValidationError("Model name is required.")

        image_url = None
        if image is not None:
            image_url = self._storage.upload(
                "models", image.filename, image.data, image.content_type
            )

        model = CatalogModel(
            model_name=name,
            model_description=(model_description or "").strip(),
            image_url=image_url,
            created_at=datetime.now(timezone.utc),
        )
        try:
            return self._repo.insert(model)
        except Exception:
            if image_url is not None:
                self._delete_image(image_url)
            raise

    def delete(self, actor: Actor, model_id: str) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can delete models")
        model = self.get(model_id)
        if not self._repo.delete(model_id):
            raise NotFoundError(f"model not found: {model_id}")
        if model.image_url:
            self._delete_image(model.image_url)

    def _delete_image(self, url: str) -> None:
        # 이미지 삭제 실패는 모델 삭제를 되돌리지 않는다.
        try:
            self._storage.delete(url)
        except Exception:  # noqa: BLE001
            logger.exception("failed to delete model image url=%s", url)


def get_catalog_repository(
    db: Database = Depends(get_database),
) -> CatalogRepositoryInterface:
    return CatalogRepository(db)


def get_photo_storage(
    db: Database = Depends(get_database),
    config: AppConfig = Depends(get_config),
) -> PhotoStorageInterface:
    """FastAPI DI용 GridFS 사진 저장소 팩토리."""

    return GridFSPhotoStorage(db, config.photo_base_url)


def get_catalog_service(
    repo: CatalogRepositoryInterface = Depends(get_catalog_repository),
    storage: PhotoStorageInterface = Depends(get_photo_storage),
) -> CatalogService:
    return CatalogService(repo, storage)
