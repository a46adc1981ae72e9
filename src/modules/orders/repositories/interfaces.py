"""Order repository interface.

Extends ``IRepository[Order]`` with the user-scoped look-ups, the
compare-and-swap status write, the audit trail and the outbox.  The
Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory
    from shared.domain.events import DomainEvent


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    Every read takes the owner's ``user_id``: an order owned by someone
    else is reported exactly like a missing one.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert a ``pending`` order.

        ``data`` must include ``user_id``, ``book_id``, ``address_id``,
        ``quantity``, ``price_at_purchase`` and ``total_price``.
        """

    @abstractmethod
    def get_owned(self, user_id: UUID, order_id: str) -> Optional[Order]:
        """Retrieve an order with its book, address and history."""

    @abstractmethod
    def get_owned_for_update(self, user_id: UUID, order_id: str) -> Optional[Order]:
        """Retrieve and row-lock an order (``SELECT ... FOR UPDATE``)."""

    @abstractmethod
    def list_for_user(self, user_id: UUID) -> "models.QuerySet[Order]":
        """All orders of one user, newest first."""

    @abstractmethod
    def transition_status(self, order_id: UUID, expected: str, new_status: str) -> bool:
        """Write ``new_status`` only if the row still holds ``expected``."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        user_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def record_events(self, order: Order) -> List[DomainEvent]:
        """Write the order's pending domain events to the outbox."""
