from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile, status

from ...errors import PrintDeskError
from ...models.order import OrderFilter, OrderPlacementInput, PhotoUpload
from ...models.photographer import Actor
from ...services.orders_service import OrdersService, get_orders_service
from ...workflows.order_status import parse_status
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.common import PaginatedResponse
from ..schemas.orders import (
    OrderCommentsUpdateRequest,
    OrderResponse,
    OrderStatusUpdateRequest,
)


router = APIRouter()


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="주문 생성 (사진 업로드 포함)",
)
def place_order(
    buyer_name: Annotated[str, Form()],
    buyer_phone: Annotated[str, Form()],
    buyer_address: Annotated[str, Form()],
    buyer_pincode: Annotated[str, Form()],
    model_id: Annotated[str, Form()],
    photos: Annotated[list[UploadFile], File()],
    remarks: Annotated[str, Form()] = "",
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    actor: Actor = Depends(get_actor),
    service: OrdersService = Depends(get_orders_service),
) -> OrderResponse:
    data = OrderPlacementInput(
        buyer_name=buyer_name,
        buyer_phone=buyer_phone,
        buyer_address=buyer_address,
        buyer_pincode=buyer_pincode,
        model_id=model_id,
        remarks=remarks,
        photos=[
            PhotoUpload(
                filename=photo.filename or "photo",
                content_type=photo.content_type,
                data=photo.file.read(),
            )
            for photo in photos
        ],
        idempotency_key=idempotency_key,
    )
    try:
        order = service.place_order(actor, data)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return OrderResponse.from_domain(order)


@router.get(
    "",
    response_model=PaginatedResponse[OrderResponse],
    summary="전체 주문 목록 (관리자)",
)
def list_orders(
    status_value: str | None = Query(None, alias="status"),
    model_id: str | None = Query(None),
    photographer_id: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: OrdersService = Depends(get_orders_service),
) -> PaginatedResponse[OrderResponse]:
    try:
        flt = OrderFilter(
            status=parse_status(status_value) if status_value else None,
            model_id=model_id,
            photographer_id=photographer_id,
            search=search,
            page=page,
            page_size=page_size,
        )
        items, total = service.list_all(actor, flt)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PaginatedResponse[OrderResponse](
        items=[OrderResponse.from_domain(o) for o in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/photographer/{photographer_uid}",
    response_model=list[OrderResponse],
    summary="포토그래퍼별 주문 목록",
)
def list_photographer_orders(
    photographer_uid: str,
    actor: Actor = Depends(get_actor),
    service: OrdersService = Depends(get_orders_service),
) -> list[OrderResponse]:
    try:
        orders = service.list_for_photographer(actor, photographer_uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return [OrderResponse.from_domain(o) for o in orders]


@router.get("/{order_id}", response_model=OrderResponse, summary="주문 조회")
def get_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrdersService = Depends(get_orders_service),
) -> OrderResponse:
    try:
        order = service.get(actor, order_id)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return OrderResponse.from_domain(order)


@router.patch(
    "/{order_id}/status", response_model=OrderResponse, summary="주문 상태 변경 (관리자)"
)
def update_order_status(
    order_id: str,
    body: OrderStatusUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: OrdersService = Depends(get_orders_service),
) -> OrderResponse:
    try:
        order = service.set_status(actor, order_id, body.status, body.admin_comments)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return OrderResponse.from_domain(order)


@router.patch(
    "/{order_id}/comments",
    response_model=OrderResponse,
    summary="관리자 코멘트 수정",
)
def update_order_comments(
    order_id: str,
    body: OrderCommentsUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: OrdersService = Depends(get_orders_service),
) -> OrderResponse:
    try:
        order = service.update_comments(actor, order_id, body.admin_comments)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return OrderResponse.from_domain(order)
