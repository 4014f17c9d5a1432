from __future__ import annotations

from pydantic import ConfigDict

from common.mongo.types import (
    BaseDocument,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.catalog import CatalogModel


class CatalogModelDocument(BaseDocument):
    """MongoDB models 컬렉션 도큐먼트 모델."""

    model_config = ConfigDict(protected_namespaces=())

    model_name: str
    model_description: str = ""
    image_url: str | None = None

    @classmethod
    def from_domain(cls, model: CatalogModel) -> "CatalogModelDocument":
        data = build_document_data_from_domain(model, exclude={"id"})
        data["updated_at"] = data["created_at"]
        return cls.model_validate(data)

    def to_domain(self) -> CatalogModel:
        return CatalogModel(
            id=from_object_id(self.id),
            model_name=self.model_name,
            model_description=self.model_description,
            image_url=self.image_url,
            created_at=self.created_at,
        )
