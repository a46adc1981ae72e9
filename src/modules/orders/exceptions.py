"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
HTTP responses:

- 404: ``UserNotFound``, ``BookNotFound``, ``InvalidAddress``, ``OrderNotFound``
- 422: ``InvalidQuantity``, ``InvalidPrice``, ``PriceMismatch``,
  ``InvalidTransition``, ``AssociatedBookMissing``, ``ValidationFailed``
- 500: ``InternalError``
"""

from __future__ import annotations

from modules.accounts.exceptions import UserNotFound
from modules.catalog.exceptions import BookNotFound
from shared.domain.exceptions import DomainError, ValidationFailed

__all__ = [
    "AssociatedBookMissing",
    "BookNotFound",
    "InternalError",
    "InvalidAddress",
    "InvalidPrice",
    "InvalidQuantity",
    "InvalidTransition",
    "OrderNotFound",
    "PriceMismatch",
    "UserNotFound",
    "ValidationFailed",
]


class InvalidAddress(DomainError):
    """The address does not exist or belongs to another user."""


class InvalidQuantity(DomainError):
    """Quantity is not positive or exceeds the available stock."""


class InvalidPrice(DomainError):
    """Unit price or total price is not positive."""


class PriceMismatch(DomainError):
    """Total price disagrees with quantity x unit price beyond the tolerance."""


class OrderNotFound(DomainError):
    """The order does not exist or is not owned by the requesting user."""


class InvalidTransition(DomainError):
    """The order is not pending, or the target status is not reachable."""


class AssociatedBookMissing(DomainError):
    """Cancellation could not return stock because the book row is gone."""


class InternalError(DomainError):
    """Unexpected data-store failure, carrying the original message."""
