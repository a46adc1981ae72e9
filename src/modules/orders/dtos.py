"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  DTOs are
immutable (``frozen=True``) and only coerce types: business validation
(stock, prices, ownership) runs in ``OrderService`` in a fixed order so
the first failing rule determines the error kind.

- ``CreateOrderDTO``: input for order placement.
- ``UpdateOrderStatusDTO``: input for a status change.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order placement.

    ``book_id`` and ``address_id`` stay strings: a malformed ID is reported
    as ``BookNotFound`` / ``InvalidAddress``, like any other unknown ID.
    """

    model_config = ConfigDict(frozen=True)

    book_id: str
    address_id: str
    quantity: int
    price_at_purchase: Decimal
    total_price: Decimal


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    status: str
    notes: str = ""
