"""Book catalog model.

- ``quantity`` is the available stock; it never drops below zero
  (``books_quantity_non_negative`` check constraint).
- ``discounted_price`` is the unit price charged at purchase.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel): a
  soft-deleted book cannot be ordered, but cancelling an older order still
  returns stock to it.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class Book(SoftDeleteModel):
    name = models.CharField(max_length=255)
    author = models.CharField(max_length=255)
    mrp = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    discounted_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    quantity = models.PositiveIntegerField(default=0)
    genre = models.CharField(max_length=100, blank=True, default="")
    book_details = models.TextField(blank=True, default="")
    book_image = models.URLField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "books"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["genre"], name="books_genre_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="books_quantity_non_negative",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info("book.created", book_id=str(self.id), name=self.name)

    def __str__(self) -> str:
        return f"{self.name} ({self.author})"
