from __future__ import annotations

from .core import Topic


# 주문/조정/정산 요청 등 잔액에 영향을 주는 모든 도메인 이벤트
TOPIC_LEDGER = Topic("printdesk.ledger")

ALL_TOPICS: list[Topic] = [
    TOPIC_LEDGER,
]
