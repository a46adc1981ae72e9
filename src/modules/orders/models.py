"""Order and OrderStatusHistory models.

Rules captured here:
- ``quantity`` is positive and ``total_price`` / ``price_at_purchase`` are
  positive (check constraints); price agreement is validated by the service.
- ``price_at_purchase`` is a snapshot of the unit price at purchase time.
- Orders are never deleted: cancellation is a status change.
- ``book`` is nullable (``SET_NULL``) so an order outlives a hard-deleted
  book; ``user`` and ``address`` use ``PROTECT``.
- Every status change is recorded in ``OrderStatusHistory``.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import VALID_TRANSITIONS, OrderStatus
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root."""

    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    book: models.ForeignKey = models.ForeignKey(
        "catalog.Book",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    address: models.ForeignKey = models.ForeignKey(
        "addresses.Address",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    price_at_purchase: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="orders_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(price_at_purchase__gt=0),
                name="orders_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(total_price__gt=0),
                name="orders_total_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``user`` is the account that requested the change; ``None`` means the
    system performed it.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
