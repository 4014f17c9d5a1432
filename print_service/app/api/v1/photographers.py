from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ...errors import PrintDeskError
from ...models.photographer import Actor
from ...services.photographers_service import (
    PhotographersService,
    get_photographers_service,
)
from ..deps import get_actor
from ..errors import to_http_exception
from ..schemas.common import PaginatedResponse
from ..schemas.photographers import (
    BankDetailsRequest,
    PhotographerResponse,
    ProfileUpdateRequest,
    SignupRequest,
)


router = APIRouter()


@router.post(
    "",
    response_model=PhotographerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="포토그래퍼 가입",
)
def signup(
    body: SignupRequest,
    actor: Actor = Depends(get_actor),
    service: PhotographersService = Depends(get_photographers_service),
) -> PhotographerResponse:
    try:
        photographer = service.signup(
            uid=actor.uid,
            display_name=body.display_name,
            email=body.email,
            phone_number=body.phone_number,
        )
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PhotographerResponse.from_domain(photographer)


@router.get("/me", response_model=PhotographerResponse, summary="내 프로필 조회")
def get_me(
    actor: Actor = Depends(get_actor),
    service: PhotographersService = Depends(get_photographers_service),
) -> PhotographerResponse:
    try:
        photographer = service.get(actor, actor.uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PhotographerResponse.from_domain(photographer)


@router.get(
    "",
    response_model=PaginatedResponse[PhotographerResponse],
    summary="포토그래퍼 목록 (관리자)",
)
def list_photographers(
    search: str | None = Query(None, description="코드/이름/이메일 검색어"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: PhotographersService = Depends(get_photographers_service),
) -> PaginatedResponse[PhotographerResponse]:
    try:
        items, total = service.list(actor, search, page, page_size)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PaginatedResponse[PhotographerResponse](
        items=[PhotographerResponse.from_domain(p) for p in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{uid}", response_model=PhotographerResponse, summary="포토그래퍼 조회")
def get_photographer(
    uid: str,
    actor: Actor = Depends(get_actor),
    service: PhotographersService = Depends(get_photographers_service),
) -> PhotographerResponse:
    try:
        photographer = service.get(actor, uid)
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PhotographerResponse.from_domain(photographer)


@router.put("/{uid}/profile", response_model=PhotographerResponse, summary="프로필 수정")
def update_profile(
    uid: str,
    body: ProfileUpdateRequest,
    actor: Actor = Depends(get_actor),
    service: PhotographersService = Depends(get_photographers_service),
) -> PhotographerResponse:
    try:
        photographer = service.update_profile(
            actor,
            uid,
            display_name=body.display_name,
            email=body.email,
            phone_number=body.phone_number,
        )
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PhotographerResponse.from_domain(photographer)


@router.put(
    "/{uid}/bank-details",
    response_model=PhotographerResponse,
    summary="정산 계좌 정보 수정",
)
def update_bank_details(
    uid: str,
    body: BankDetailsRequest,
    actor: Actor = Depends(get_actor),
    service: PhotographersService = Depends(get_photographers_service),
) -> PhotographerResponse:
    try:
        photographer = service.update_bank_details(actor, uid, body.to_domain())
    except PrintDeskError as exc:
        raise to_http_exception(exc) from exc
    return PhotographerResponse.from_domain(photographer)
