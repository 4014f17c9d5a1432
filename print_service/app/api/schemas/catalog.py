from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from common.types.datetime import UtcDateTime

from ...models.catalog import CatalogModel


class CatalogModelResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    model_name: str
    model_description: str
    image_url: str | None
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, model: CatalogModel) -> "CatalogModelResponse":
        return cls(
            id=model.id or "",
            model_name=model.model_name,
            model_description=model.model_description,
            image_url=model.image_url,
            created_at=model.created_at,
        )
