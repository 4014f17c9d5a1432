from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...errors import PrintDeskError
from ...models.photographer import Actor
from ...services.adjustments_service import AdjustmentsService, get_adjustments_service
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.adjustments import AdjustmentRequest, AdjustmentResponse


router = APIRouter()


@router.post(
    "",
    response_model=AdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="수동 조정 등록 (관리자)",
)
def post_adjustment(
    body: AdjustmentRequest,
    actor: Actor = Depends(get_actor),
    service: AdjustmentsService = Depends(get_adjustments_service),
) -> AdjustmentResponse:
    try:
        adjustment = service.post_adjustment(
            actor, body.photographer_uid, body.amount, body.remarks
        )
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return AdjustmentResponse.from_domain(adjustment)


@router.get(
    "/photographer/{photographer_uid}",
    response_model=list[AdjustmentResponse],
    summary="포토그래퍼별 수동 조정 이력",
)
def list_adjustments(
    photographer_uid: str,
    actor: Actor = Depends(get_actor),
    service: AdjustmentsService = Depends(get_adjustments_service),
) -> list[AdjustmentResponse]:
    try:
        items = service.list_for_photographer(actor, photographer_uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return [AdjustmentResponse.from_domain(a) for a in items]
