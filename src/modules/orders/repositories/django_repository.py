"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  The service
owns the transaction boundary; methods here join it (``atomic`` becomes a
savepoint when nested).

Status updates combine a row lock (``select_for_update``) with a
compare-and-swap ``UPDATE ... WHERE status = <expected>``, so two
concurrent cancellations can never both succeed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.orders.constants import ORDERS_TOPIC, OrderStatus
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(
            user_id=data["user_id"],
            book_id=data["book_id"],
            address_id=data["address_id"],
            quantity=data["quantity"],
            price_at_purchase=data["price_at_purchase"],
            total_price=data["total_price"],
            status=OrderStatus.PENDING,
        )
        order.save()
        logger.info("order.inserted", order_id=str(order.id), user_id=str(order.user_id))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Unscoped look-up for maintenance code; request paths use ``get_owned``.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Order.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_owned(self, user_id: UUID, order_id: str) -> Optional[Order]:
        """Eager-loads book and address (JOIN) and history (prefetch).

        Returns ``None`` for foreign, non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("book", "address")
                .prefetch_related("status_history")
                .filter(id=order_id, user_id=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_owned_for_update(self, user_id: UUID, order_id: str) -> Optional[Order]:
        """Row-locked look-up.

        No ``select_related``: PostgreSQL refuses ``FOR UPDATE`` on the
        nullable side of the outer join to ``book``.
        """
        try:
            return (
                Order.objects.select_for_update()
                .filter(id=order_id, user_id=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list_for_user(self, user_id: UUID) -> models.QuerySet[Order]:
        return (
            Order.objects.select_related("book")
            .filter(user_id=user_id)
            .order_by("-created_at", "-id")
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def transition_status(self, order_id: UUID, expected: str, new_status: str) -> bool:
        """Direct column update: no model validation runs."""
        updated = Order.objects.filter(id=order_id, status=expected).update(
            status=new_status, updated_at=timezone.now()
        )
        return updated == 1

    def save(self, entity: Order) -> Order:
        """Unsupported; ``create`` and ``transition_status`` are the write paths."""
        raise NotImplementedError(
            "Orders are written through create() and transition_status()."
        )

    @transaction.atomic
    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        user_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            user_id=user_id,
        )
        history.save()

        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def record_events(self, order: Order) -> List[DomainEvent]:
        events = order.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=event.to_payload(),
                topic=ORDERS_TOPIC,
            )
        order.clear_domain_events()
        return events
