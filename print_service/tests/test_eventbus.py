from __future__ import annotations

import json

import pytest

from common.eventbus import kafka as kafka_module
from common.eventbus.core import RetryDelays
from common.eventbus.helpers import new_json_event
from common.eventbus.topics import TOPIC_LEDGER


class _RecordingProducer:
    def __init__(self, config: dict) -> None:
        self.config = config
        self.produced: list[dict] = []

    def produce(self, *, topic: str, value: bytes, key: bytes, callback) -> None:
        self.produced.append({"topic": topic, "value": json.loads(value), "key": key.decode()})

    def poll(self, timeout: float) -> int:
        return 0

    def flush(self) -> int:
        return 0


@pytest.fixture
def bus(monkeypatch: pytest.MonkeyPatch) -> kafka_module.KafkaEventBus:
    monkeypatch.setattr(kafka_module, "Producer", _RecordingProducer)
    return kafka_module.KafkaEventBus("localhost:9092")


def test_publish_uses_photographer_uid_as_partition_key(bus) -> None:
    event = new_json_event({"type": "redeem.submitted", "amount": "100.00"}, key="uid-1", event_id="e1")

    bus.publish(TOPIC_LEDGER.base, event)

    produced = bus._producer.produced[0]
    assert produced["topic"] == "printdesk.ledger"
    assert produced["key"] == "uid-1"
    assert produced["value"]["payload"]["amount"] == "100.00"


def test_failed_event_moves_to_next_retry_topic(bus) -> None:
    event = new_json_event({"type": "order.placed"}, key="uid-1", event_id="e1")

    assert bus._reroute_failed(TOPIC_LEDGER, event, RuntimeError("mongo down"))

    produced = bus._producer.produced[0]
    assert produced["topic"] == "printdesk.ledger.retry.1"
    assert produced["value"]["retry"] == 1


def test_event_past_max_retry_goes_to_dlq(bus) -> None:
    event = new_json_event({"type": "order.placed"}, key="uid-1", event_id="e1")
    event.retry = len(RetryDelays)

    bus._reroute_failed(TOPIC_LEDGER, event, RuntimeError("still down"))

    assert bus._producer.produced[0]["topic"] == "printdesk.ledger.dlq"


def test_decode_event_restores_retry_state() -> None:
    evt = kafka_module.KafkaEventBus._decode_event(
        {"id": "e1", "payload": {"type": "x"}, "key": "uid-1", "retry": 2, "max_retry": 4}
    )

    assert evt.retry == 2
    assert evt.max_retry == 4
    assert evt.payload == {"type": "x"}
