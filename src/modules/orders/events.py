"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when an order is committed; drives the confirmation email."""

    email: str = ""
    total_price: str = "0.00"
    book_id: Optional[str] = None
    quantity: int = 0


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when a pending order is cancelled and its stock returned."""

    book_id: Optional[str] = None
    restored_quantity: int = 0


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised for non-cancelling status changes."""

    old_status: str = ""
    new_status: str = ""
