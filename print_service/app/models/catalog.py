from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CatalogModel(BaseModel):
    """주문 시 고를 수 있는 3D 모델 카탈로그 항목."""

    model_config = ConfigDict(protected_namespaces=())

    id: str | None = None
    model_name: str
    model_description: str = ""
    image_url: str | None = None
    created_at: datetime
