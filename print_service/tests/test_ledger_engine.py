from __future__ import annotations

from decimal import Decimal

import pytest

from print_service.app.config import EarningsConfig
from print_service.app.ledger.engine import LedgerEngine
from print_service.app.models.earnings import LedgerEntryType
from print_service.app.models.order import OrderStatus
from print_service.app.models.redeem import RedeemStatus
from print_service.app.workflows.order_status import OrderStatusWorkflow

from print_service.tests.fakes import (
    EARNINGS,
    at,
    build_adjustment,
    build_order,
    build_redeem,
)


@pytest.fixture
def engine() -> LedgerEngine:
    return LedgerEngine(EARNINGS)


@pytest.mark.parametrize("delivered,unaccepted", [(0, 0), (1, 0), (0, 3), (7, 2), (120, 45)])
def test_order_earnings_formula(engine: LedgerEngine, delivered: int, unaccepted: int) -> None:
    # when
    result = engine.order_earnings(delivered, unaccepted)

    # then
    assert result == delivered * Decimal("300") - unaccepted * Decimal("100")


def test_order_earnings_uses_injected_constants() -> None:
    custom = LedgerEngine(
        EarningsConfig(earning_per_order=Decimal("250.50"), penalty_per_unaccepted=Decimal("75"))
    )

    assert custom.order_earnings(2, 1) == Decimal("426.00")


def test_adjustment_earnings_includes_negative_entries(engine: LedgerEngine) -> None:
    adjustments = [
        build_adjustment("50"),
        build_adjustment("-20"),
        build_adjustment("12.75"),
        build_adjustment("-0.25"),
    ]

    assert engine.adjustment_earnings(adjustments) == Decimal("42.50")


def test_adjustment_earnings_of_empty_list_is_zero(engine: LedgerEngine) -> None:
    assert engine.adjustment_earnings([]) == Decimal("0")


def test_scenario_a_summary(engine: LedgerEngine) -> None:
    orders = [
        build_order(1, OrderStatus.DELIVERED),
        build_order(2, OrderStatus.DELIVERED),
        build_order(3, OrderStatus.DELIVERED),
        build_order(4, OrderStatus.UNACCEPTED),
    ]
    adjustments = [build_adjustment("50"), build_adjustment("-20")]
    redeems = [build_redeem("200", RedeemStatus.PAID, amount_paid="200")]

    # when
    summary = engine.summarize(orders, adjustments, redeems)

    # then
    assert summary.order_earnings == Decimal("800")
    assert summary.adjustment_earnings == Decimal("30")
    assert summary.gross_earnings == Decimal("830")
    assert summary.total_redeemed == Decimal("200")
    assert summary.redeemable_earnings == Decimal("630")
    assert summary.stats.delivered == 3
    assert summary.stats.unaccepted == 1
    assert summary.stats.total == 4


def test_order_stats_counts_each_bucket(engine: LedgerEngine) -> None:
    orders = [
        build_order(1, OrderStatus.PENDING),
        build_order(2, OrderStatus.PRINTING),
        build_order(3, OrderStatus.SHIPPED),
        build_order(4, OrderStatus.DELIVERED),
        build_order(5, OrderStatus.UNACCEPTED),
        build_order(6, OrderStatus.REJECTED),
    ]

    stats = engine.order_stats(orders)

    assert (stats.total, stats.progress, stats.delivered, stats.unaccepted, stats.rejected) == (
        6,
        3,
        1,
        1,
        1,
    )


def test_pending_and_rejected_redeems_do_not_reduce_balance(engine: LedgerEngine) -> None:
    orders = [build_order(1, OrderStatus.DELIVERED)]
    redeems = [
        build_redeem("100", RedeemStatus.PENDING),
        build_redeem("50", RedeemStatus.REJECTED),
    ]

    summary = engine.summarize(orders, (), redeems)

    assert summary.total_redeemed == Decimal("0")
    assert summary.redeemable_earnings == Decimal("300")
    assert summary.pending_redeem_total == Decimal("100")
    assert summary.available_to_redeem == Decimal("200")


def test_redeemable_can_go_negative(engine: LedgerEngine) -> None:
    orders = [build_order(1, OrderStatus.UNACCEPTED), build_order(2, OrderStatus.UNACCEPTED)]

    summary = engine.summarize(orders)

    assert summary.redeemable_earnings == Decimal("-200")


def test_scenario_c_delivered_then_rejected_contributes_nothing(engine: LedgerEngine) -> None:
    workflow = OrderStatusWorkflow(engine)
    order = build_order(1)

    delivered = workflow.set_status(order, "delivered", is_admin=True, now=at(10)).order
    assert engine.summarize([delivered]).order_earnings == Decimal("300")

    # when
    rejected = workflow.set_status(delivered, "rejected", is_admin=True, now=at(20)).order

    # then
    summary = engine.summarize([rejected])
    assert summary.order_earnings == Decimal("0")
    assert summary.redeemable_earnings == Decimal("0")
    assert engine.statement([rejected]) == []


def test_summary_and_statement_are_idempotent(engine: LedgerEngine) -> None:
    orders = [build_order(1, OrderStatus.DELIVERED), build_order(2, OrderStatus.UNACCEPTED)]
    adjustments = [build_adjustment("15", created_at=at(5))]
    redeems = [
        build_redeem("100", RedeemStatus.PAID, amount_paid="100", processed_at=at(30))
    ]

    first = (engine.summarize(orders, adjustments, redeems), engine.statement(orders, adjustments, redeems))
    second = (engine.summarize(orders, adjustments, redeems), engine.statement(orders, adjustments, redeems))

    assert first == second


def test_statement_is_newest_first_with_running_balance(engine: LedgerEngine) -> None:
    orders = [
        build_order(1, OrderStatus.DELIVERED, created_at=at(0)),
        build_order(2, OrderStatus.UNACCEPTED, created_at=at(10)),
        build_order(3, OrderStatus.PENDING, created_at=at(15)),
    ]
    adjustments = [build_adjustment("-20", created_at=at(20), adjustment_id="adj-1")]
    redeems = [
        build_redeem(
            "100",
            RedeemStatus.PAID,
            amount_paid="100",
            redeem_id="rdm-1",
            requested_at=at(25),
            processed_at=at(30),
        ),
        build_redeem("50", RedeemStatus.PENDING, requested_at=at(40)),
    ]

    # when
    entries = engine.statement(orders, adjustments, redeems)

    # then
    assert [e.type for e in entries] == [
        LedgerEntryType.REDEEM_PAYOUT,
        LedgerEntryType.ADJUSTMENT,
        LedgerEntryType.ORDER_PENALTY,
        LedgerEntryType.ORDER_EARNING,
    ]
    assert [e.amount for e in entries] == [
        Decimal("-100"),
        Decimal("-20"),
        Decimal("-100"),
        Decimal("300"),
    ]
    assert [e.running_balance for e in entries] == [
        Decimal("80"),
        Decimal("180"),
        Decimal("200"),
        Decimal("300"),
    ]
    assert entries[0].running_balance == engine.summarize(
        orders, adjustments, redeems
    ).redeemable_earnings
    assert entries[0].occurred_at == at(30)
    assert entries[-1].reference_id == "JOHN001_001"


def test_statement_ties_keep_input_order(engine: LedgerEngine) -> None:
    same_time = at(0)
    orders = [build_order(1, OrderStatus.DELIVERED, created_at=same_time)]
    adjustments = [build_adjustment("10", created_at=same_time)]

    entries = engine.statement(orders, adjustments)

    assert [e.type for e in entries] == [LedgerEntryType.ORDER_EARNING, LedgerEntryType.ADJUSTMENT]


def test_status_effect_matches_constants(engine: LedgerEngine) -> None:
    assert engine.status_effect(OrderStatus.DELIVERED) == Decimal("300")
    assert engine.status_effect(OrderStatus.UNACCEPTED) == Decimal("-100")
    assert engine.status_effect(OrderStatus.REJECTED) == Decimal("0")
    assert engine.status_effect(OrderStatus.PENDING) == Decimal("0")
