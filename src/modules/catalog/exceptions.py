"""Catalog domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DomainError


class BookNotFound(DomainError):
    """The book does not exist or has been soft-deleted."""


class InsufficientStock(DomainError):
    """A conditional stock decrement matched no row.

    ``available`` is the stock read right after the failed update.
    """

    def __init__(self, message: str = "", available: int = 0) -> None:
        super().__init__(message)
        self.available = available
