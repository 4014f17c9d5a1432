from __future__ import annotations

from pydantic import BaseModel

from common.types.datetime import UtcDateTime
from common.types.money import Money

from ...models.earnings import (
    DashboardStats,
    EarningsSummary,
    LedgerEntryType,
    LedgerTransaction,
    OrderStats,
    PhotographerEarnings,
)


class EarningsSummaryResponse(BaseModel):
    stats: OrderStats
    order_earnings: Money
    adjustment_earnings: Money
    gross_earnings: Money
    total_redeemed: Money
    redeemable_earnings: Money
    pending_redeem_total: Money
    available_to_redeem: Money

    @classmethod
    def from_domain(cls, summary: EarningsSummary) -> "EarningsSummaryResponse":
        return cls.model_validate(summary.model_dump())


class LedgerTransactionResponse(BaseModel):
    type: LedgerEntryType
    amount: Money
    occurred_at: UtcDateTime
    reference_id: str | None
    description: str
    running_balance: Money

    @classmethod
    def from_domain(cls, entry: LedgerTransaction) -> "LedgerTransactionResponse":
        return cls.model_validate(entry.model_dump())


class StatementResponse(BaseModel):
    items: list[LedgerTransactionResponse]


class PhotographerEarningsResponse(BaseModel):
    uid: str
    photographer_id: str
    display_name: str
    email: str
    redeemable_earnings: Money
    delivered: int
    unaccepted: int

    @classmethod
    def from_domain(cls, item: PhotographerEarnings) -> "PhotographerEarningsResponse":
        return cls.model_validate(item.model_dump())


class DashboardResponse(DashboardStats):
    @classmethod
    def from_domain(cls, stats: DashboardStats) -> "DashboardResponse":
        return cls.model_validate(stats.model_dump())
