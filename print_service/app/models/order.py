"""주문 도메인 모델."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(StrEnum):
    PENDING = "pending"
    PRINTING = "printing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    UNACCEPTED = "unaccepted"
    REJECTED = "rejected"


# "진행 중"으로 집계되는 상태
IN_PROGRESS_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PRINTING, OrderStatus.SHIPPED}
)


class Order(BaseModel):
    """3D 프린트 주문.

    status / admin_comments 는 관리자만 바꾸고, 나머지 필드는 생성 후 불변이다.
    """

    model_config = ConfigDict(protected_namespaces=())

    id: str | None = None
    order_id: str  # "{photographer_id}_{seq:03d}"
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
    created_at: datetime
    updated_at: datetime


class PhotoUpload(BaseModel):
    """업로드할 주문 사진 한 장."""

    filename: str
    content_type: str | None = None
    data: bytes


class OrderPlacementInput(BaseModel):
    """주문 생성 입력."""

    model_config = ConfigDict(protected_namespaces=())

    buyer_name: str
    buyer_phone: str
    buyer_address: str
    buyer_pincode: str
    model_id: str
    remarks: str = ""
    photos: list[PhotoUpload] = Field(default_factory=list)
    idempotency_key: str | None = None


class OrderFilter(BaseModel):
    """관리자 주문 목록 필터."""

    model_config = ConfigDict(protected_namespaces=())

    status: OrderStatus | None = None
    model_id: str | None = None
    photographer_id: str | None = None
    search: str | None = None
    page: int = 1
    page_size: int = 20
