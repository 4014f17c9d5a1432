"""포토그래퍼(주문을 넣는 테넌트) 도메인 모델."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class BankDetails(BaseModel):
    """정산 입금 계좌 정보.

    account_number 와 ifsc 가 모두 채워져 있어야 정산 요청을 낼 수 있다.
    """

    account_name: str = ""
    account_number: str = ""
    ifsc: str = ""

    def is_complete(self) -> bool:
        return bool(self.account_number.strip()) and bool(self.ifsc.strip())


class Photographer(BaseModel):
    """포토그래퍼 도메인 모델.

    - uid: 인증 제공자가 발급한 불투명 식별자 (photographers 컬렉션의 _id)
    - photographer_id: 사람이 읽는 순번 코드 (예: JOHN001, PH001)
    - order_counter: 다음 주문 순번 계산용 카운터. IdentifierAllocator 만 증가시킨다.
    """

    uid: str
    photographer_id: str
    display_name: str
    email: str
    phone_number: str
    order_counter: int = 0
    bank_details: BankDetails = Field(default_factory=BankDetails)
    created_at: datetime
    updated_at: datetime


class Actor(BaseModel):
    """요청 주체. 관리자 여부는 인증 계층에서 판별해 플래그로 넘겨받는다."""

    uid: str
    email: str | None = None
    is_admin: bool = False

    def can_access(self, photographer_uid: str) -> bool:
        return self.is_admin or self.uid == photographer_uid
