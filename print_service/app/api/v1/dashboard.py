from __future__ import annotations

from fastapi import APIRouter, Depends

from ...errors import PrintDeskError
from ...models.photographer import Actor
from ...services.earnings_service import EarningsService, get_earnings_service
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.earnings import DashboardResponse


router = APIRouter()


@router.get("", response_model=DashboardResponse, summary="관리자 대시보드 집계")
def get_dashboard(
    actor: Actor = Depends(get_actor),
    service: EarningsService = Depends(get_earnings_service),
) -> DashboardResponse:
    try:
        stats = service.dashboard(actor)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return DashboardResponse.from_domain(stats)
