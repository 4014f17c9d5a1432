from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer


CENTS = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """금액을 소수 둘째 자리(반올림)로 맞춘다."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def serialize_money(value: Decimal) -> str:
    """JSON 응답에서는 금액을 "830.00" 형태의 문자열로 내보낸다."""
    return str(quantize_money(value))


Money = Annotated[
    Decimal,
    PlainSerializer(serialize_money, return_type=str, when_used="json"),
]
