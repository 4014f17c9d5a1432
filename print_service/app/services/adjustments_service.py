from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import Depends
from pymongo.database import Database

from common.mongo.client import get_database

from ..errors import NotFoundError, PermissionDeniedError, ValidationError
from ..models.adjustment import ManualAdjustment
from ..models.photographer import Actor
from ..repositories.adjustment_repository import AdjustmentRepository
from ..repositories.interfaces import (
    AdjustmentRepositoryInterface,
    PhotographerRepositoryInterface,
)
from ..workflows.redeem import parse_amount
from .ledger_events import LedgerEventPublisher, get_ledger_event_publisher
from .photographers_service import get_photographer_repository


logger = logging.getLogger(__name__)


class AdjustmentsService:
    """관리자 수동 조정(보너스/차감) 등록. 등록된 조정은 수정/삭제하지 않는다."""

    def __init__(
        self,
        repo: AdjustmentRepositoryInterface,
        photographer_repo: PhotographerRepositoryInterface,
        events: LedgerEventPublisher,
    ) -> None:
        self._repo = repo
        self._photographer_repo = photographer_repo
        self._events = events

    def post_adjustment(
        self,
        actor: Actor,
        photographer_uid: str,
        amount: Decimal | int | float | str,
        remarks: str,
    ) -> ManualAdjustment:
        if not actor.is_admin:
            raise PermissionDeniedError("only the admin can post adjustments")

        value = parse_amount(amount)
        if value == 0:
            raise ValidationError("Adjustment amount must not be zero.")
        text = (remarks or "").strip()
        if not text:
            raise ValidationError("Remarks are mandatory for all adjustments.")

        photographer = self._photographer_repo.find_by_uid(photographer_uid)
        if photographer is None:
            raise NotFoundError(f"photographer not found: {photographer_uid}")

        adjustment = ManualAdjustment(
            photographer_uid=photographer.uid,
            photographer_id=photographer.photographer_id,
            amount=value,
            remarks=text,
            admin_uid=actor.uid,
            admin_email=actor.email,
            created_at=datetime.now(timezone.utc),
        )
        created = self._repo.insert(adjustment)
        logger.info(
            "manual adjustment posted",
            extra={
                "actor_uid": actor.uid,
                "photographer_uid": photographer.uid,
                "amount": str(value),
            },
        )
        self._events.adjustment_posted(created)
        return created

    def list_for_photographer(
        self, actor: Actor, photographer_uid: str
    ) -> list[ManualAdjustment]:
        if not actor.can_access(photographer_uid):
            raise PermissionDeniedError("cannot view another photographer's adjustments")
        return self._repo.list_by_photographer(photographer_uid)


def get_adjustment_repository(
    db: Database = Depends(get_database),
) -> AdjustmentRepositoryInterface:
    return AdjustmentRepository(db)


def get_adjustments_service(
    repo: AdjustmentRepositoryInterface = Depends(get_adjustment_repository),
    photographer_repo: PhotographerRepositoryInterface = Depends(
        get_photographer_repository
    ),
    events: LedgerEventPublisher = Depends(get_ledger_event_publisher),
) -> AdjustmentsService:
    return AdjustmentsService(repo, photographer_repo, events)
