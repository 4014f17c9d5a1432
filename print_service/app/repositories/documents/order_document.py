from __future__ import annotations

from pydantic import ConfigDict, Field

from common.mongo.types import BaseDocument, build_document_data_from_domain, from_object_id

from ...models.order import Order, OrderStatus


class OrderDocument(BaseDocument):
    """MongoDB orders 컬렉션 도큐먼트 모델."""

    model_config = ConfigDict(protected_namespaces=())

    order_id: str
    photographer_uid: str
    photographer_id: str
    photographer_name: str = ""
    buyer_name: str
    buyer_phone: str
    buyer_address: str
    buyer_pincode: str
    model_id: str
    model_name: str
    remarks: str = ""
    photo_urls: list[str] = Field(default_factory=list)
    status: OrderStatus = OrderStatus.PENDING
    admin_comments: str = ""
    idempotency_key: str | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderDocument":
        data = build_document_data_from_domain(order, exclude={"id"})
        return cls.model_validate(data)

    def to_domain(self) -> Order:
        return Order(
            id=from_object_id(self.id),
            order_id=self.order_id,
            photographer_uid=self.photographer_uid,
            photographer_id=self.photographer_id,
            photographer_name=self.photographer_name,
            buyer_name=self.buyer_name,
            buyer_phone=self.buyer_phone,
            buyer_address=self.buyer_address,
            buyer_pincode=self.buyer_pincode,
            model_id=self.model_id,
            model_name=self.model_name,
            remarks=self.remarks,
            photo_urls=list(self.photo_urls),
            status=self.status,
            admin_comments=self.admin_comments,
            idempotency_key=self.idempotency_key,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
