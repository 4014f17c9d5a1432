from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from common.types.datetime import OptionalUtcDateTime, UtcDateTime
from common.types.money import Money

from ...models.redeem import RedeemRequest, RedeemStatus


class RedeemSubmitRequest(BaseModel):
    amount: Decimal


class RedeemResolveRequest(BaseModel):
    decision: str  # "paid" | "rejected"
    amount_paid: Decimal | None = None
    remarks: str = ""


class RedeemResponse(BaseModel):
    id: str
    photographer_uid: str
    photographer_id: str
    photographer_name: str
    amount: Money
    status: RedeemStatus
    amount_paid: Money
    remarks: str
    requested_at: UtcDateTime
    processed_at: OptionalUtcDateTime = None

    @classmethod
    def from_domain(cls, request: RedeemRequest) -> "RedeemResponse":
        return cls(
            id=request.id or "",
            photographer_uid=request.photographer_uid,
            photographer_id=request.photographer_id,
            photographer_name=request.photographer_name,
            amount=request.amount,
            status=request.status,
            amount_paid=request.amount_paid,
            remarks=request.remarks,
            requested_at=request.requested_at,
            processed_at=request.processed_at,
        )
