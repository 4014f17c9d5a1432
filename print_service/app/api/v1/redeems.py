from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, status

from ...errors import PrintDeskError, ValidationError
from ...models.photographer import Actor
from ...models.redeem import RedeemStatus
from ...services.redeem_service import RedeemService, get_redeem_service
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.common import PaginatedResponse
from ..schemas.redeems import RedeemResolveRequest, RedeemResponse, RedeemSubmitRequest


router = APIRouter()


@router.post(
    "",
    response_model=RedeemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="정산 요청",
)
def submit_redeem(
    body: RedeemSubmitRequest,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    actor: Actor = Depends(get_actor),
    service: RedeemService = Depends(get_redeem_service),
) -> RedeemResponse:
    try:
        request = service.submit(actor, body.amount, idempotency_key=idempotency_key)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return RedeemResponse.from_domain(request)


@router.get(
    "",
    response_model=PaginatedResponse[RedeemResponse],
    summary="상태별 정산 요청 목록 (관리자)",
)
def list_redeems(
    status_value: str = Query("pending", alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: RedeemService = Depends(get_redeem_service),
) -> PaginatedResponse[RedeemResponse]:
    try:
        try:
            redeem_status = RedeemStatus(status_value.strip().lower())
        except ValueError as exc:
            raise ValidationError(f"unknown redeem status: {status_value!r}") from exc
        items, total = service.list_by_status(actor, redeem_status, page, page_size)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PaginatedResponse[RedeemResponse](
        items=[RedeemResponse.from_domain(r) for r in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/photographer/{photographer_uid}",
    response_model=list[RedeemResponse],
    summary="포토그래퍼별 정산 요청 이력",
)
def list_photographer_redeems(
    photographer_uid: str,
    actor: Actor = Depends(get_actor),
    service: RedeemService = Depends(get_redeem_service),
) -> list[RedeemResponse]:
    try:
        items = service.list_for_photographer(actor, photographer_uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return [RedeemResponse.from_domain(r) for r in items]


@router.post(
    "/{redeem_id}/resolve",
    response_model=RedeemResponse,
    summary="정산 요청 처리 (관리자)",
)
def resolve_redeem(
    redeem_id: str,
    body: RedeemResolveRequest,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    actor: Actor = Depends(get_actor),
    service: RedeemService = Depends(get_redeem_service),
) -> RedeemResponse:
    try:
        request = service.resolve(
            actor,
            redeem_id,
            body.decision,
            amount_paid=body.amount_paid,
            remarks=body.remarks,
            resolution_key=idempotency_key,
        )
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return RedeemResponse.from_domain(request)
