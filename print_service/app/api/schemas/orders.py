from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from common.types.datetime import UtcDateTime

from ...models.order import Order, OrderStatus


class OrderResponse(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    order_id: str
    photographer_uid: str
    photographer_id: str
    photographer_name: str
    buyer_name: str
    buyer_phone: str
    buyer_address: str
    buyer_pincode: str
    model_id: str
    model_name: str
    remarks: str
    photo_urls: list[str]
    status: OrderStatus
    admin_comments: str
    created_at: UtcDateTime
    updated_at: UtcDateTime

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls.model_validate(order.model_dump(exclude={"id", "idempotency_key"}))


class OrderStatusUpdateRequest(BaseModel):
    status: str
    admin_comments: str | None = None


class OrderCommentsUpdateRequest(BaseModel):
    admin_comments: str
