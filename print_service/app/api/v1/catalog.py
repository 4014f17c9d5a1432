from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ...errors import PrintDeskError
from ...models.order import PhotoUpload
from ...models.photographer import Actor
from ...services.catalog_service import CatalogService, get_catalog_service
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.catalog import CatalogModelResponse


router = APIRouter()


@router.get("", response_model=list[CatalogModelResponse], summary="모델 카탈로그 목록")
def list_models(
    service: CatalogService = Depends(get_catalog_service),
) -> list[CatalogModelResponse]:
    return [CatalogModelResponse.from_domain(m) for m in service.list()]


@router.post(
    "",
    response_model=CatalogModelResponse,
    status_code=status.HTTP_201_CREATED,
    summary="모델 추가 (관리자)",
)
def add_model(
    model_name: Annotated[str, Form()],
    model_description: Annotated[str, Form()] = "",
    image: Annotated[UploadFile | None, File()] = None,
    actor: Actor = Depends(get_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> CatalogModelResponse:
    upload = None
    if image is not None:
        upload = PhotoUpload(
            filename=image.filename or "model",
            content_type=image.content_type,
            data=image.file.read(),
        )
    try:
        model = service.add(actor, model_name, model_description, upload)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return CatalogModelResponse.from_domain(model)


@router.delete("/{model_id}", summary="모델 삭제 (관리자)")
def delete_model(
    model_id: str,
    actor: Actor = Depends(get_actor),
    service: CatalogService = Depends(get_catalog_service),
) -> dict[str, str]:
    try:
        service.delete(actor, model_id)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"message": "model_deleted"}
