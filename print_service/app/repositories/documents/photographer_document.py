"""포토그래퍼 MongoDB 도큐먼트.

_id 는 ObjectId 가 아니라 인증 제공자의 uid 문자열을 그대로 쓴다.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from common.mongo.types import BaseDocument

from ...models.photographer import BankDetails, Photographer


class BankDetailsDocument(BaseModel):
    account_name: str = ""
    account_number: str = ""
    ifsc: str = ""


class PhotographerDocument(BaseDocument):
    """MongoDB photographers 컬렉션 도큐먼트 모델."""

    id: str = Field(alias="_id")  # type: ignore[assignment]
    photographer_id: str
    display_name: str
    email: str
    phone_number: str
    order_counter: int = 0
    bank_details: BankDetailsDocument = Field(default_factory=BankDetailsDocument)
    # 동시 정산 요청 직렬화용. 트랜잭션마다 1 씩 올려 쓰기 충돌을 유도한다.
    redeem_guard: int = 0

    @classmethod
    def from_domain(cls, photographer: Photographer) -> "PhotographerDocument":
        data = photographer.model_dump()
        data["_id"] = data.pop("uid")
        return cls.model_validate(data)

    def to_domain(self) -> Photographer:
        return Photographer(
            uid=self.id,
            photographer_id=self.photographer_id,
            display_name=self.display_name,
            email=self.email,
            phone_number=self.phone_number,
            order_counter=self.order_counter,
            bank_details=BankDetails(**self.bank_details.model_dump()),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
