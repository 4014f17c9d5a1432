from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from common.types.datetime import UtcDateTime
from common.types.money import Money

from ...models.adjustment import ManualAdjustment


class AdjustmentRequest(BaseModel):
    photographer_uid: str
    amount: Decimal
    remarks: str


class AdjustmentResponse(BaseModel):
    id: str
    photographer_uid: str
    photographer_id: str
    amount: Money
    remarks: str
    admin_email: str | None
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, adjustment: ManualAdjustment) -> "AdjustmentResponse":
        return cls(
            id=adjustment.id or "",
            photographer_uid=adjustment.photographer_uid,
            photographer_id=adjustment.photographer_id,
            amount=adjustment.amount,
            remarks=adjustment.remarks,
            admin_email=adjustment.admin_email,
            created_at=adjustment.created_at,
        )
