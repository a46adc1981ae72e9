"""Unit tests for the OutboxEvent model and its relay query."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.unit


def _make_event(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "OrderPlaced",
        "payload": {"email": "a@example.com", "total_price": "30.00"},
        "aggregate_id": "order-1",
        "topic": "orders",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class TestOutboxEventLifecycle:
    def test_defaults(self):
        event = _make_event()
        event.refresh_from_db()
        assert event.status == EventStatus.PENDING
        assert event.retry_count == 0
        assert event.processed_at is None
        assert event.payload["total_price"] == "30.00"

    def test_mark_as_published(self):
        event = _make_event()
        event.mark_as_published()
        event.refresh_from_db()
        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None

    def test_mark_as_failed_counts_retries(self):
        event = _make_event()
        event.mark_as_failed("broker down")
        event.mark_as_failed("broker still down")
        event.refresh_from_db()
        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "broker still down"

    def test_str(self):
        assert str(_make_event()) == "OrderPlaced [PENDING] (order-1)"


class TestRelayable:
    def test_recent_pending_events_are_left_alone(self):
        _make_event()
        cutoff = timezone.now() - timedelta(minutes=2)
        assert not OutboxEvent.objects.relayable("OrderPlaced", cutoff, 5).exists()

    def test_old_pending_events_are_relayable(self):
        with freeze_time(timezone.now() - timedelta(minutes=10)):
            event = _make_event()
        cutoff = timezone.now() - timedelta(minutes=2)
        assert list(OutboxEvent.objects.relayable("OrderPlaced", cutoff, 5)) == [event]

    def test_failed_events_stop_after_max_retries(self):
        retryable = _make_event(aggregate_id="order-2")
        retryable.mark_as_failed("x")
        exhausted = _make_event(aggregate_id="order-3")
        for _ in range(5):
            exhausted.mark_as_failed("x")

        relayable = OutboxEvent.objects.relayable("OrderPlaced", timezone.now(), 5)

        assert retryable in relayable
        assert exhausted not in relayable

    def test_published_and_other_types_are_skipped(self):
        with freeze_time(timezone.now() - timedelta(minutes=10)):
            published = _make_event(aggregate_id="order-4")
            _make_event(event_type="OrderCancelled", aggregate_id="order-5")
        published.mark_as_published()

        cutoff = timezone.now() - timedelta(minutes=2)
        assert not OutboxEvent.objects.relayable("OrderPlaced", cutoff, 5).exists()
