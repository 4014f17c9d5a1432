from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database

from ..errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..models.photographer import Actor, BankDetails, Photographer
from ..repositories.interfaces import PhotographerRepositoryInterface
from ..repositories.photographer_repository import PhotographerRepository
from .identifier_allocator import IdentifierAllocator, get_identifier_allocator


logger = logging.getLogger(__name__)

MIN_PHONE_DIGITS = 10


def _require(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required.")
    return text


def _validate_phone(value: str | None) -> str:
    phone = _require(value, "Phone number")
    if len(re.sub(r"\D", "", phone)) < MIN_PHONE_DIGITS:
        raise ValidationError(
            f"Phone number must have at least {MIN_PHONE_DIGITS} digits."
        )
    return phone


class PhotographersService:
    """포토그래퍼 가입 / 프로필 / 계좌 정보 관리.

    가입 시 포토그래퍼 코드를 먼저 발급받고, 발급이 확정된 뒤에만 도큐먼트를 만든다.
    """

    def __init__(
        self,
        repo: PhotographerRepositoryInterface,
        allocator: IdentifierAllocator,
    ) -> None:
        self._repo = repo
        self._allocator = allocator

    def signup(
        self,
        uid: str,
        display_name: str,
        email: str,
        phone_number: str,
    ) -> Photographer:
        uid = _require(uid, "User id")
        display_name = _require(display_name, "Name")
        email = _require(email, "Email")
        phone_number = _validate_phone(phone_number)

        if self._repo.find_by_uid(uid) is not None:
            raise ConflictError(f"photographer already registered: {uid}")

        # 발급 실패(AllocationFailed) 시 도큐먼트를 만들지 않는다.
        photographer_id = self._allocator.allocate_photographer_id(display_name)

        now = datetime.now(timezone.utc)
        photographer = Photographer(
            uid=uid,
            photographer_id=photographer_id,
            display_name=display_name,
            email=email,
            phone_number=phone_number,
            order_counter=0,
            bank_details=BankDetails(),
            created_at=now,
            updated_at=now,
        )
        created = self._repo.insert(photographer)
        logger.info(
            "photographer signed up",
            extra={"photographer_uid": uid, "photographer_id": photographer_id},
        )
        return created

    def get(self, actor: Actor, uid: str) -> Photographer:
        if not actor.can_access(uid):
            raise PermissionDeniedError("cannot view another photographer's profile")
        photographer = self._repo.find_by_uid(uid)
        if photographer is None:
            raise NotFoundError(f"photographer not found: {uid}")
        return photographer

    def update_profile(
        self,
        actor: Actor,
        uid: str,
        display_name: str,
        email: str,
        phone_number: str,
    ) -> Photographer:
        if not actor.can_access(uid):
            raise PermissionDeniedError("cannot edit another photographer's profile")

        updated = self._repo.update_profile(
            uid,
            display_name=_require(display_name, "Name"),
            email=_require(email, "Email"),
            phone_number=_validate_phone(phone_number),
        )
        if updated is None:
            raise NotFoundError(f"photographer not found: {uid}")
        return updated

    def update_bank_details(
        self, actor: Actor, uid: str, bank_details: BankDetails
    ) -> Photographer:
        if not actor.can_access(uid):
            raise PermissionDeniedError("cannot edit another photographer's bank details")

        cleaned = BankDetails(
            account_name=bank_details.account_name.strip(),
            account_number=bank_details.account_number.strip(),
            ifsc=bank_details.ifsc.strip().upper(),
        )
        updated = self._repo.update_bank_details(uid, cleaned)
        if updated is None:
            raise NotFoundError(f"photographer not found: {uid}")
        logger.info("bank details updated", extra={"photographer_uid": uid})
        return updated

    def list(
        self,
        actor: Actor,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Photographer], int]:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can list photographers")
        return self._repo.list(search, page, page_size)


def get_photographer_repository(
    db: Database = Depends(get_database),
) -> PhotographerRepositoryInterface:
    """FastAPI DI용 PhotographerRepository 팩토리."""

    return PhotographerRepository(db)


def get_photographers_service(
    repo: PhotographerRepositoryInterface = Depends(get_photographer_repository),
    allocator: IdentifierAllocator = Depends(get_identifier_allocator),
) -> PhotographersService:
    """FastAPI DI용 PhotographersService 팩토리."""

    return PhotographersService(repo, allocator)
