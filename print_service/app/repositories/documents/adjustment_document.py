from __future__ import annotations

from common.mongo.types import (
    BaseDocument,
    MoneyDecimal,
    build_document_data_from_domain,
    from_object_id,
)

from ...models.adjustment import ManualAdjustment


class ManualAdjustmentDocument(BaseDocument):
    """MongoDB manual_adjustments 컬렉션 도큐먼트 모델.

    수정 이력이 없는 append-only 컬렉션이라 updated_at 은 created_at 과 같다.
    """

    photographer_uid: str
    photographer_id: str
    amount: MoneyDecimal
    remarks: str
    admin_uid: str | None = None
    admin_email: str | None = None

    @classmethod
    def from_domain(cls, adjustment: ManualAdjustment) -> "ManualAdjustmentDocument":
        data = build_document_data_from_domain(adjustment, exclude={"id"})
        data["updated_at"] = data["created_at"]
        return cls.model_validate(data)

    def to_domain(self) -> ManualAdjustment:
        return ManualAdjustment(
            id=from_object_id(self.id),
            photographer_uid=self.photographer_uid,
            photographer_id=self.photographer_id,
            amount=self.amount,
            remarks=self.remarks,
            admin_uid=self.admin_uid,
            admin_email=self.admin_email,
            created_at=self.created_at,
        )
