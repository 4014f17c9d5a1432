from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MoneyDecimal,
    MongoDateTime,
    OptionalMongoDateTime,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.redeem import RedeemRequest, RedeemStatus


class RedeemRequestDocument(BaseDocument):
    """MongoDB redeem_requests 컬렉션 도큐먼트 모델.

    requested_at 이 생성 시각이며, created_at / updated_at 은 공통 필드로 함께 둔다.
    """

    photographer_uid: str
    photographer_id: str
    photographer_name: str = ""
    amount: MoneyDecimal
    status: RedeemStatus = RedeemStatus.PENDING
    amount_paid: MoneyDecimal = 0  # type: ignore[assignment]
    remarks: str = ""
    requested_at: MongoDateTime
    processed_at: OptionalMongoDateTime = None
    processed_by: str | None = None
    idempotency_key: str | None = None
    resolution_key: str | None = None

    @classmethod
    def from_domain(cls, request: RedeemRequest) -> "RedeemRequestDocument":
        data = build_document_data_from_domain(request, exclude={"id"})
        data["created_at"] = request.requested_at
        data["updated_at"] = request.processed_at or request.requested_at
        return cls.model_validate(data)

    def to_domain(self) -> RedeemRequest:
        return RedeemRequest(
            id=from_object_id(self.id),
            photographer_uid=self.photographer_uid,
            photographer_id=self.photographer_id,
            photographer_name=self.photographer_name,
            amount=self.amount,
            status=self.status,
            amount_paid=self.amount_paid,
            remarks=self.remarks,
            requested_at=self.requested_at,
            processed_at=self.processed_at,
            processed_by=self.processed_by,
            idempotency_key=self.idempotency_key,
            resolution_key=self.resolution_key,
        )
