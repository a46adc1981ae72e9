"""Integration tests for ``OrderService.update_status`` and cancellation.

Covers:
- Cancellation restores stock exactly and only once.
- Only pending orders move; every other status is final.
- Ownership isolation: foreign orders look nonexistent.
- Missing book on cancel rolls the status change back.
- History, outbox and after-commit publication.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from django.core.exceptions import ValidationError
from django.db import DatabaseError

from modules.accounts.repositories import UserDjangoRepository
from modules.addresses.repositories import AddressDjangoRepository
from modules.catalog.exceptions import BookNotFound
from modules.catalog.repositories import BookDjangoRepository
from modules.core.authentication import UserRef
from modules.core.models import EventStatus, OutboxEvent
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from modules.orders.exceptions import (
    AssociatedBookMissing,
    InternalError,
    InvalidTransition,
    OrderNotFound,
    UserNotFound,
    ValidationFailed,
)
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService

pytestmark = pytest.mark.integration


def _stock(book) -> int:
    book.refresh_from_db(fields=["quantity"])
    return book.quantity


@pytest.fixture()
def order(place_order, user_ref, book, address):
    return place_order(user_ref, book, address, quantity=3)


class TestCancellation:
    def test_cancel_restores_stock_exactly(self, order_service, user_ref, order, book):
        assert _stock(book) == 7

        cancelled = order_service.cancel_order(user_ref, str(order.id))

        assert cancelled.status == OrderStatus.CANCELLED
        assert _stock(book) == 10

    def test_cancel_is_one_shot(self, order_service, user_ref, order, book):
        order_service.cancel_order(user_ref, str(order.id))

        with pytest.raises(InvalidTransition, match="Only pending orders can be cancelled."):
            order_service.cancel_order(user_ref, str(order.id))
        assert _stock(book) == 10

    def test_cancel_via_update_status(self, order_service, user_ref, order, book):
        order_service.update_status(user_ref, str(order.id), "cancelled", notes="changed mind")
        assert _stock(book) == 10
        latest = OrderStatusHistory.objects.filter(order=order).last()
        assert latest.notes == "changed mind"

    def test_cancel_restocks_soft_deleted_book(self, order_service, user_ref, order, book):
        book.delete()
        order_service.cancel_order(user_ref, str(order.id))
        assert _stock(book) == 10

    def test_missing_book_rolls_back(self, order_service, user_ref, order, book):
        book.hard_delete()

        with pytest.raises(AssociatedBookMissing, match="Associated book not found."):
            order_service.cancel_order(user_ref, str(order.id))

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert not OutboxEvent.objects.filter(event_type="OrderCancelled").exists()

    def test_book_deleted_between_lock_and_restore(self, order_service, user_ref, order, book):
        with patch.object(BookDjangoRepository, "adjust_stock", side_effect=BookNotFound("gone")):
            with pytest.raises(AssociatedBookMissing):
                order_service.cancel_order(user_ref, str(order.id))

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_restore_validation_error_is_validation_failed(self, order_service, user_ref, order):
        error = ValidationError({"quantity": ["Stock adjustment must be an integer."]})
        with patch.object(BookDjangoRepository, "adjust_stock", side_effect=error):
            with pytest.raises(ValidationFailed) as info:
                order_service.cancel_order(user_ref, str(order.id))

        assert info.value.messages == ["quantity: Stock adjustment must be an integer."]
        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_database_error_is_internal_error(self, order_service, user_ref, order):
        with patch.object(OrderDjangoRepository, "add_history", side_effect=DatabaseError("boom")):
            with pytest.raises(InternalError, match="boom"):
                order_service.cancel_order(user_ref, str(order.id))

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING


class TestOtherTransitions:
    @pytest.mark.parametrize(
        "target", [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
    )
    def test_pending_moves_without_touching_stock(self, order_service, user_ref, order, book, target):
        updated = order_service.update_status(user_ref, str(order.id), target)

        assert updated.status == target
        assert _stock(book) == 7

    def test_shipped_order_cannot_be_cancelled(self, order_service, user_ref, order, book):
        order_service.update_status(user_ref, str(order.id), OrderStatus.SHIPPED)

        with pytest.raises(InvalidTransition):
            order_service.cancel_order(user_ref, str(order.id))
        assert _stock(book) == 7

    def test_unknown_status(self, order_service, user_ref, order):
        with pytest.raises(ValidationFailed, match="Status must be one of"):
            order_service.update_status(user_ref, str(order.id), "lost")

    def test_pending_to_pending_is_invalid(self, order_service, user_ref, order):
        with pytest.raises(InvalidTransition, match="Cannot transition from pending to pending"):
            order_service.update_status(user_ref, str(order.id), OrderStatus.PENDING)

    def test_lost_compare_and_swap_is_invalid_transition(self, order_service, user_ref, order, book):
        with patch.object(OrderDjangoRepository, "transition_status", return_value=False):
            with pytest.raises(InvalidTransition):
                order_service.cancel_order(user_ref, str(order.id))
        assert _stock(book) == 7


class TestOwnership:
    def test_foreign_order_is_not_found_on_get(self, order_service, order, make_user):
        intruder = make_user()
        with pytest.raises(OrderNotFound, match="Order not found."):
            order_service.get_order(UserRef(user_id=intruder.id), str(order.id))

    def test_foreign_order_is_not_found_on_update(self, order_service, order, book, make_user):
        intruder = make_user()
        with pytest.raises(OrderNotFound):
            order_service.cancel_order(UserRef(user_id=intruder.id), str(order.id))
        assert _stock(book) == 7

    @pytest.mark.parametrize("order_id", [str(uuid4()), "garbage"])
    def test_missing_or_malformed_id(self, order_service, user_ref, order_id):
        with pytest.raises(OrderNotFound):
            order_service.get_order(user_ref, order_id)
        with pytest.raises(OrderNotFound):
            order_service.cancel_order(user_ref, order_id)

    def test_deleted_user(self, order_service, order):
        with pytest.raises(UserNotFound):
            order_service.cancel_order(UserRef(user_id=uuid4()), str(order.id))


class TestAuditTrail:
    def test_history_records_each_change(self, order_service, user_ref, order):
        order_service.cancel_order(user_ref, str(order.id))

        history = list(OrderStatusHistory.objects.filter(order=order).order_by("created_at", "id"))
        assert [(h.old_status, h.new_status) for h in history] == [
            (None, OrderStatus.PENDING),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
        ]
        assert history[1].notes == "Order cancelled"
        assert history[1].user_id == user_ref.user_id

    def test_outbox_rows_per_change(self, order_service, user_ref, order, make_book, address, place_order):
        order_service.cancel_order(user_ref, str(order.id))
        other = place_order(user_ref, make_book(), address)
        order_service.update_status(user_ref, str(other.id), OrderStatus.SHIPPED)

        cancelled = OutboxEvent.objects.get(event_type="OrderCancelled")
        assert cancelled.payload["restored_quantity"] == 3
        changed = OutboxEvent.objects.get(event_type="OrderStatusChanged")
        assert changed.payload["old_status"] == "pending"
        assert changed.payload["new_status"] == "shipped"


class TestAfterCommitPublication:
    def _service(self, bus):
        return OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            book_repository=BookDjangoRepository(),
            address_repository=AddressDjangoRepository(),
            event_bus=bus,
        )

    def test_events_published_only_on_commit(
        self, django_capture_on_commit_callbacks, user_ref, book, address, make_dto
    ):
        bus = MagicMock()
        service = self._service(bus)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            order = service.create_order(user_ref, make_dto(book, address))

        bus.publish.assert_not_called()
        for callback in callbacks:
            callback()

        (event,), _ = bus.publish.call_args
        assert isinstance(event, OrderPlaced)
        assert event.aggregate_id == order.id

    def test_status_events_published(self, django_capture_on_commit_callbacks, user_ref, order):
        bus = MagicMock()
        service = self._service(bus)

        with django_capture_on_commit_callbacks(execute=True):
            service.update_status(user_ref, str(order.id), OrderStatus.PROCESSING)
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(InvalidTransition):
                service.cancel_order(user_ref, str(order.id))

        published = [call.args[0] for call in bus.publish.call_args_list]
        assert len(published) == 1
        assert isinstance(published[0], OrderStatusChanged)

    def test_failed_cancel_publishes_nothing(self, django_capture_on_commit_callbacks, user_ref, order, book):
        bus = MagicMock()
        service = self._service(bus)
        book.hard_delete()

        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(AssociatedBookMissing):
                service.cancel_order(user_ref, str(order.id))

        assert not any(
            isinstance(call.args[0], OrderCancelled) for call in bus.publish.call_args_list
        )

    @pytest.mark.parametrize(
        ("target", "event_type"),
        [(OrderStatus.CANCELLED, "OrderCancelled"), (OrderStatus.SHIPPED, "OrderStatusChanged")],
    )
    def test_handlers_mark_status_rows_published(
        self, django_capture_on_commit_callbacks, order_service, user_ref, order, target, event_type
    ):
        with django_capture_on_commit_callbacks(execute=True):
            order_service.update_status(user_ref, str(order.id), target)

        row = OutboxEvent.objects.get(event_type=event_type, aggregate_id=str(order.id))
        assert row.status == EventStatus.PUBLISHED
        assert row.processed_at is not None

    def test_status_rows_stay_pending_until_commit(self, order_service, user_ref, order):
        order_service.cancel_order(user_ref, str(order.id))

        row = OutboxEvent.objects.get(event_type="OrderCancelled")
        assert row.status == EventStatus.PENDING

    def test_order_rows_match_outbox(self, order):
        assert Order.objects.count() == 1
        assert OutboxEvent.objects.filter(aggregate_id=str(order.id)).count() == 1
