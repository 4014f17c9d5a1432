"""요청 주체(Actor) 해석.

인증은 게이트웨이가 처리하고, 검증된 사용자 정보를 헤더로 넘겨준다. 관리자 여부는
X-User-Email 이 ADMIN_EMAIL 과 같은지로만 판단한다.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from common.middleware.request_trace import USER_ID_HEADER

from ..config import AppConfig, get_config
from ..models.photographer import Actor


USER_EMAIL_HEADER = "X-User-Email"


def get_actor(
    user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
    user_email: str | None = Header(default=None, alias=USER_EMAIL_HEADER),
    config: AppConfig = Depends(get_config),
) -> Actor:
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing user identity",
        )
    email = user_email.strip() if user_email else None
    return Actor(
        uid=user_id.strip(),
        email=email,
        is_admin=config.is_admin_email(email),
    )
