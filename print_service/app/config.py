from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


EARNING_PER_ORDER = "EARNING_PER_ORDER"
PENALTY_PER_UNACCEPTED = "PENALTY_PER_UNACCEPTED"
ADMIN_EMAIL = "ADMIN_EMAIL"
ORDER_STRICT_TRANSITIONS = "ORDER_STRICT_TRANSITIONS"
PHOTOGRAPHER_ID_PREFIX = "PHOTOGRAPHER_ID_PREFIX"
ALLOCATOR_MAX_ATTEMPTS = "ALLOCATOR_MAX_ATTEMPTS"
ALLOCATOR_BASE_DELAY_SECONDS = "ALLOCATOR_BASE_DELAY_SECONDS"
ALLOCATOR_TIMEOUT_SECONDS = "ALLOCATOR_TIMEOUT_SECONDS"
PHOTO_BASE_URL = "PHOTO_BASE_URL"

DEFAULT_EARNING_PER_ORDER = Decimal("300")
DEFAULT_PENALTY_PER_UNACCEPTED = Decimal("100")


@dataclass(slots=True, frozen=True)
class EarningsConfig:
    """주문 상태별 정산 금액 설정.

    배포 시점에 고정되며 LedgerEngine / 워크플로우 생성 시 명시적으로 주입한다.
    """

    earning_per_order: Decimal = DEFAULT_EARNING_PER_ORDER
    penalty_per_unaccepted: Decimal = DEFAULT_PENALTY_PER_UNACCEPTED


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """카운터/트랜잭션 재시도 정책.

    - max_attempts: 최초 시도를 포함한 총 시도 횟수
    - base_delay: 지수 백오프 시작 간격(초), 시도마다 2배
    - timeout: 전체 재시도에 쓸 수 있는 최대 시간(초)
    """

    max_attempts: int = 5
    base_delay: float = 0.05
    timeout: float = 5.0

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** (attempt - 1))


@dataclass(slots=True)
class AppConfig:
    """print-service 전체 설정."""

    earnings: EarningsConfig
    retry: RetryPolicy
    admin_email: str
    strict_order_transitions: bool = False
    photographer_id_prefix: str | None = None
    photo_base_url: str = "/api/v1/photos"

    def is_admin_email(self, email: str | None) -> bool:
        if not email or not self.admin_email:
            return False
        return email.strip().lower() == self.admin_email.strip().lower()


def _read_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation as exc:
        raise RuntimeError(f"{name} must be a decimal value, got: {raw!r}") from exc
    if value < 0:
        raise RuntimeError(f"{name} must not be negative, got: {raw!r}")
    return value


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer if set, got: {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got: {raw!r}")
    return value


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a float if set, got: {raw!r}") from exc
    if value < 0:
        raise RuntimeError(f"{name} must not be negative, got: {raw!r}")
    return value


def _read_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_earnings_config() -> EarningsConfig:
    return EarningsConfig(
        earning_per_order=_read_decimal(EARNING_PER_ORDER, DEFAULT_EARNING_PER_ORDER),
        penalty_per_unaccepted=_read_decimal(
            PENALTY_PER_UNACCEPTED, DEFAULT_PENALTY_PER_UNACCEPTED
        ),
    )


def load_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=_read_int(ALLOCATOR_MAX_ATTEMPTS, 5),
        base_delay=_read_float(ALLOCATOR_BASE_DELAY_SECONDS, 0.05),
        timeout=_read_float(ALLOCATOR_TIMEOUT_SECONDS, 5.0),
    )


def load_config() -> AppConfig:
    """환경 변수에서 print-service 설정을 로드한다.

    ADMIN_EMAIL 은 관리자 판별에 쓰이므로 반드시 설정되어야 한다.
    """

    admin_email = os.getenv(ADMIN_EMAIL, "").strip()
    if not admin_email:
        raise RuntimeError(f"{ADMIN_EMAIL} environment variable is required")

    prefix = os.getenv(PHOTOGRAPHER_ID_PREFIX, "").strip().upper() or None

    return AppConfig(
        earnings=load_earnings_config(),
        retry=load_retry_policy(),
        admin_email=admin_email,
        strict_order_transitions=_read_bool(ORDER_STRICT_TRANSITIONS, False),
        photographer_id_prefix=prefix,
        photo_base_url=os.getenv(PHOTO_BASE_URL, "/api/v1/photos").rstrip("/"),
    )


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """프로세스 전역 설정 (최초 호출 시 로드). FastAPI Depends 로도 사용한다."""

    global _config
    if _config is None:
        _config = load_config()
    return _config
