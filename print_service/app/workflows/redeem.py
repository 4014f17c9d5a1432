"""정산 요청 상태 머신.

pending -> paid      (amount_paid > 0, 종결)
pending -> rejected  (amount_paid = 0, 종결)

접수 시 잔액 검증과 처리 시 1회성 보장을 모두 여기서 한다. 저장소 쪽에서도
status == pending 조건부 업데이트로 같은 규칙을 한 번 더 강제한다.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

from ..errors import InvalidStateError, PermissionDeniedError, ValidationError
from ..models.earnings import EarningsSummary
from ..models.photographer import Photographer
from ..models.redeem import RedeemRequest, RedeemStatus


ZERO = Decimal("0")


def parse_amount(value: Decimal | int | float | str | None, *, field: str = "amount") -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"{field} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return amount


def parse_decision(value: str | RedeemStatus) -> RedeemStatus:
    try:
        decision = RedeemStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"unknown redeem decision: {value!r}") from exc
    if decision == RedeemStatus.PENDING:
        raise ValidationError("decision must be 'paid' or 'rejected'")
    return decision


class RedeemWorkflow:
    """정산 요청 접수/처리 규칙."""

    def submit(
        self,
        photographer: Photographer,
        amount: Decimal | int | float | str,
        summary: EarningsSummary,
        *,
        now: datetime,
        idempotency_key: str | None = None,
    ) -> RedeemRequest:
        """잔액과 계좌 정보를 검증하고 pending 상태의 요청을 만든다.

        summary 는 반드시 같은 트랜잭션 안에서 원본 도큐먼트를 다시 읽어 계산한 값이어야 한다.
        접수 대기 중인 요청 금액도 한도에서 빠지므로, 여러 요청을 연달아 내더라도
        합계가 잔액을 넘지 않는다.
        """

        value = parse_amount(amount)
        if value <= ZERO:
            raise ValidationError("Please enter a valid amount to redeem.")

        if summary.redeemable_earnings <= ZERO:
            raise ValidationError("You have no redeemable earnings.")

        if value > summary.redeemable_earnings:
            raise ValidationError("You cannot redeem more than your redeemable earnings.")

        if value > summary.available_to_redeem:
            raise ValidationError(
                "Amount exceeds your redeemable earnings minus requests still pending."
            )

        if not photographer.bank_details.is_complete():
            raise ValidationError(
                "Please update your bank details on your Profile page before redeeming."
            )

        return RedeemRequest(
            photographer_uid=photographer.uid,
            photographer_id=photographer.photographer_id,
            photographer_name=photographer.display_name or photographer.email,
            amount=value,
            status=RedeemStatus.PENDING,
            amount_paid=ZERO,
            requested_at=now,
            idempotency_key=idempotency_key,
        )

    def resolve(
        self,
        request: RedeemRequest,
        decision: str | RedeemStatus,
        *,
        is_admin: bool,
        now: datetime,
        amount_paid: Decimal | int | float | str | None = None,
        remarks: str = "",
        admin_uid: str | None = None,
        resolution_key: str | None = None,
    ) -> RedeemRequest:
        if not is_admin:
            raise PermissionDeniedError("only the admin can resolve redeem requests")

        target = parse_decision(decision)

        match request.status:
            case RedeemStatus.PENDING:
                pass
            case RedeemStatus.PAID | RedeemStatus.REJECTED:
                raise InvalidStateError(
                    f"redeem request {request.id} is already {request.status}"
                )

        match target:
            case RedeemStatus.PAID:
                paid = parse_amount(amount_paid, field="amount_paid")
                if paid <= ZERO:
                    raise ValidationError("Amount paid must be greater than 0.")
            case RedeemStatus.REJECTED:
                paid = ZERO

        return request.model_copy(
            update={
                "status": target,
                "amount_paid": paid,
                "remarks": remarks or "",
                "processed_at": now,
                "processed_by": admin_uid,
                "resolution_key": resolution_key,
            }
        )
