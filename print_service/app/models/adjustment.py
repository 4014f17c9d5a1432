"""관리자 수동 조정 도메인 모델."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ManualAdjustment(BaseModel):
    """수동 조정 (보너스/차감). 생성 후 수정/삭제하지 않는다."""

    id: str | None = None
    photographer_uid: str
    photographer_id: str
    amount: Decimal  # 부호 있는 금액, 0 이 아님
    remarks: str
    admin_uid: str | None = None
    admin_email: str | None = None
    created_at: datetime
