"""Order domain constants.

Status choices and the transitions ``OrderService.update_status`` allows:
a ``pending`` order may move to any other status once; every other
status is final for that operation.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: set(),
    OrderStatus.SHIPPED: set(),
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

DEFAULT_PRICE_TOLERANCE = Decimal("0.01")

MONEY_QUANTUM = Decimal("0.01")

ORDERS_TOPIC = "orders"
