"""Event handlers for Orders domain events.

Handlers run after the order transaction has committed.  Cancellation and
status-change events have no consumer beyond these handlers, so their
outbox rows are marked published here.
"""

from __future__ import annotations

from typing import Optional

import structlog

from modules.core.models import OutboxEvent
from modules.notifications.dispatcher import NotificationDispatcher
from modules.orders.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPlacedHandler(IEventHandler[OrderPlaced]):
    """Ask the Notification Dispatcher for the confirmation email."""

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None) -> None:
        self._dispatcher = dispatcher or NotificationDispatcher()

    def handle(self, event: OrderPlaced) -> None:
        logger.info("order.event.placed", order_id=str(event.aggregate_id))
        self._dispatcher.notify_order_placed(
            order_id=event.aggregate_id,
            email=event.email,
            total_price=event.total_price,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            restored_quantity=event.restored_quantity,
        )
        OutboxEvent.objects.mark_published(event.event_name, str(event.aggregate_id))


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )
        OutboxEvent.objects.mark_published(event.event_name, str(event.aggregate_id))


order_placed_handler = OrderPlacedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_status_changed_handler = OrderStatusChangedHandler()
