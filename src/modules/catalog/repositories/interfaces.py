"""Book repository interface.

The Order Ledger is the only writer of ``Book.quantity`` and it does so
exclusively through ``adjust_stock``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Book


class IBookRepository(IRepository["Book"]):
    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Book]:
        """Retrieve a purchasable (not soft-deleted) book."""

    @abstractmethod
    def adjust_stock(self, book_id: UUID, delta: int) -> int:
        """Apply ``delta`` to the book's stock atomically; return the new stock.

        Negative deltas only apply while ``quantity >= -delta``.

        Raises:
            InsufficientStock: the decrement would drive stock negative.
            BookNotFound: no such book (or soft-deleted, for decrements).
            django.core.exceptions.ValidationError: ``delta`` is not a
                non-zero integer.
        """
