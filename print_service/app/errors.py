"""print-service 도메인 예외.

서비스/워크플로우에서 발생시키고, API 라우터에서 HTTP 상태 코드로 변환한다.
"""

from __future__ import annotations


class PrintDeskError(Exception):
    """도메인 예외 공통 베이스."""


class ValidationError(PrintDeskError):
    """호출자가 넘긴 입력이 사전 조건을 만족하지 않는다 (사용자에게 그대로 노출)."""


class InvalidStateError(PrintDeskError):
    """엔티티가 요청한 연산에 필요한 상태가 아니다 (예: 이미 처리된 정산 요청)."""


class AllocationFailed(PrintDeskError):
    """카운터 증가가 재시도 한도 안에 커밋되지 못했다."""


class NotFoundError(PrintDeskError):
    """참조한 포토그래퍼/주문/요청이 존재하지 않는다."""


class PermissionDeniedError(PrintDeskError):
    """관리자 전용 연산을 일반 사용자가 호출했거나, 다른 포토그래퍼의 데이터에 접근했다."""


class TransientStoreError(PrintDeskError):
    """일시적인 저장소 오류 (쓰기 충돌, 연결 재시도 등). 재시도 대상이다."""


class ConflictError(PrintDeskError):
    """유니크 제약 위반 (같은 uid 로 재가입, 같은 멱등성 키로 동시 생성 등)."""
