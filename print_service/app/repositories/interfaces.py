from __future__ import annotations

from typing import BinaryIO, Callable, Protocol

from ..models.adjustment import ManualAdjustment
from ..models.catalog import CatalogModel
from ..models.earnings import LedgerSnapshot
from ..models.order import Order, OrderFilter, OrderStatus
from ..models.photographer import BankDetails, Photographer
from ..models.redeem import RedeemRequest, RedeemStatus


class PhotographerRepositoryInterface(Protocol):
    """PhotographerRepository가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    """

    def find_by_uid(self, uid: str) -> Photographer | None:  # pragma: no cover - Protocol
        ...

    def insert(self, photographer: Photographer) -> Photographer:  # pragma: no cover - Protocol
        """같은 uid / photographer_id 가 이미 있으면 ConflictError."""
        ...

    def update_profile(
        self, uid: str, display_name: str, email: str, phone_number: str
    ) -> Photographer | None:  # pragma: no cover - Protocol
        ...

    def update_bank_details(
        self, uid: str, bank_details: BankDetails
    ) -> Photographer | None:  # pragma: no cover - Protocol
        ...

    def list(
        self, search: str | None, page: int, page_size: int
    ) -> tuple[list[Photographer], int]:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[Photographer]:  # pragma: no cover - Protocol
        ...


class CounterRepositoryInterface(Protocol):
    """원자적 카운터 증가 계약.

    두 메서드 모두 단일 도큐먼트 read-modify-write 한 번으로 처리되어야 하며,
    일시적 충돌은 TransientStoreError 로 알린다.
    """

    def increment_photographer_counter(self) -> int:  # pragma: no cover - Protocol
        """전역 포토그래퍼 카운터를 1 올리고 증가 후 값을 반환한다."""
        ...

    def increment_order_counter(
        self, photographer_uid: str
    ) -> tuple[str, int] | None:  # pragma: no cover - Protocol
        """포토그래퍼의 order_counter 를 1 올리고 (photographer_id, 증가 후 값)을 반환한다.

        포토그래퍼 도큐먼트가 없으면 None.
        """
        ...


class OrderRepositoryInterface(Protocol):
    def insert(self, order: Order) -> Order:  # pragma: no cover - Protocol
        """같은 order_id / 멱등성 키가 이미 있으면 ConflictError."""
        ...

    def find_by_order_id(self, order_id: str) -> Order | None:  # pragma: no cover - Protocol
        ...

    def find_by_idempotency_key(
        self, photographer_uid: str, key: str
    ) -> Order | None:  # pragma: no cover - Protocol
        ...

    def list_by_photographer(
        self, photographer_uid: str
    ) -> list[Order]:  # pragma: no cover - Protocol
        ...

    def list(self, flt: OrderFilter) -> tuple[list[Order], int]:  # pragma: no cover - Protocol
        ...

    def save_status(self, order: Order) -> Order | None:  # pragma: no cover - Protocol
        """status / admin_comments / updated_at 만 갱신한다."""
        ...

    def count_by_status(self) -> dict[OrderStatus, int]:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[Order]:  # pragma: no cover - Protocol
        ...


class AdjustmentRepositoryInterface(Protocol):
    def insert(
        self, adjustment: ManualAdjustment
    ) -> ManualAdjustment:  # pragma: no cover - Protocol
        ...

    def list_by_photographer(
        self, photographer_uid: str
    ) -> list[ManualAdjustment]:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[ManualAdjustment]:  # pragma: no cover - Protocol
        ...


class RedeemRepositoryInterface(Protocol):
    def find_by_id(self, id_value: str) -> RedeemRequest | None:  # pragma: no cover - Protocol
        ...

    def list_by_photographer(
        self, photographer_uid: str
    ) -> list[RedeemRequest]:  # pragma: no cover - Protocol
        ...

    def list_by_status(
        self, status: RedeemStatus, page: int, page_size: int
    ) -> tuple[list[RedeemRequest], int]:  # pragma: no cover - Protocol
        ...

    def count_by_status(self, status: RedeemStatus) -> int:  # pragma: no cover - Protocol
        ...

    def apply_resolution(
        self, resolved: RedeemRequest
    ) -> RedeemRequest | None:  # pragma: no cover - Protocol
        """status == pending 인 경우에만 처리 결과를 기록한다. 조건 불일치 시 None."""
        ...

    def list_all(self) -> list[RedeemRequest]:  # pragma: no cover - Protocol
        ...


class LedgerStoreInterface(Protocol):
    """정산 원본 데이터를 한 트랜잭션 안에서 읽고 쓰는 계약."""

    def load_snapshot(
        self, photographer_uid: str
    ) -> LedgerSnapshot:  # pragma: no cover - Protocol
        ...

    def submit_redeem(
        self,
        photographer_uid: str,
        idempotency_key: str | None,
        decide: Callable[[Photographer, LedgerSnapshot], RedeemRequest],
    ) -> tuple[RedeemRequest, bool]:  # pragma: no cover - Protocol
        """트랜잭션 안에서 포토그래퍼와 원본 데이터를 다시 읽고 decide 결과를 저장한다.

        반환값의 두 번째 요소는 새로 만들었는지 여부다 (같은 멱등성 키면 False).
        포토그래퍼가 없으면 NotFoundError, 일시적 충돌은 TransientStoreError.
        """
        ...


class CatalogRepositoryInterface(Protocol):
    def list(self) -> list[CatalogModel]:  # pragma: no cover - Protocol
        ...

    def find_by_id(self, id_value: str) -> CatalogModel | None:  # pragma: no cover - Protocol
        ...

    def insert(self, model: CatalogModel) -> CatalogModel:  # pragma: no cover - Protocol
        ...

    def delete(self, id_value: str) -> bool:  # pragma: no cover - Protocol
        ...


class PhotoStorageInterface(Protocol):
    """사진 바이트를 저장하고 조회 URL 을 돌려주는 오브젝트 스토리지 계약."""

    def upload(
        self, owner: str, filename: str, data: bytes, content_type: str | None
    ) -> str:  # pragma: no cover - Protocol
        ...

    def delete(self, url: str) -> bool:  # pragma: no cover - Protocol
        ...

    def open(
        self, file_id: str
    ) -> tuple[BinaryIO, str | None, str] | None:  # pragma: no cover - Protocol
        ...


class AuditRepositoryInterface(Protocol):
    def append(self, entry: dict) -> bool:  # pragma: no cover - Protocol
        """감사 로그 한 건 추가. 같은 event_id 가 이미 있으면 False."""
        ...
