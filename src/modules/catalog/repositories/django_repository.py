"""Django ORM implementation of the Book repository.

Stock changes are single relative ``UPDATE`` statements so concurrent
writers serialize on the book row inside the database::

    UPDATE books SET quantity = quantity - n
     WHERE id = ? AND deleted_at IS NULL AND quantity >= n

Reading the stock, validating it and writing it back in separate steps is
never done here.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.catalog.exceptions import BookNotFound, InsufficientStock
from modules.catalog.models import Book
from modules.catalog.repositories.interfaces import IBookRepository

logger = structlog.get_logger(__name__)


class BookDjangoRepository(IBookRepository):
    """Concrete Book repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Book]:
        """Returns ``None`` for non-existent, soft-deleted or invalid IDs."""
        try:
            return Book.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @transaction.atomic
    def save(self, entity: Book) -> Book:
        entity.save()
        logger.info("book.saved", book_id=str(entity.id))
        return entity

    def adjust_stock(self, book_id: UUID, delta: int) -> int:
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError(
                {"quantity": ["Stock adjustment must be an integer."]}
            )
        if delta == 0:
            raise ValidationError({"quantity": ["Stock adjustment must not be zero."]})

        if delta < 0:
            rows = Book.objects.alive().filter(id=book_id)
            updated = rows.filter(quantity__gte=-delta).update(
                quantity=F("quantity") + delta, updated_at=timezone.now()
            )
        else:
            rows = Book.objects.filter(id=book_id)
            updated = rows.update(
                quantity=F("quantity") + delta, updated_at=timezone.now()
            )

        current = rows.values_list("quantity", flat=True).first()
        log = logger.bind(book_id=str(book_id), delta=delta)

        if not updated:
            if current is None:
                log.warning("book.stock_adjust_missing")
                raise BookNotFound(f"Book with ID {book_id} not found.")
            log.warning("book.stock_insufficient", available=current)
            raise InsufficientStock(
                f"Insufficient stock for book {book_id}: {current} available.",
                available=current,
            )

        log.info("book.stock_adjusted", quantity=current)
        return current
