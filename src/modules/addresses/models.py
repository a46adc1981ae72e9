"""Shipping addresses, each owned by exactly one user.

Orders reference addresses with ``PROTECT``; removal of an address that
any order points to is refused by ``AddressService.remove_address``.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class AddressType(models.TextChoices):
    HOME = "home", "Home"
    WORK = "work", "Work"
    OTHER = "other", "Other"


class Address(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    street = models.CharField(max_length=100)
    city = models.CharField(max_length=50)
    state = models.CharField(max_length=50)
    zip_code = models.CharField(max_length=10)
    country = models.CharField(max_length=50)
    address_type = models.CharField(
        max_length=10,
        choices=AddressType.choices,
        default=AddressType.HOME,
    )
    is_default = models.BooleanField(default=False)

    class Meta:
        db_table = "addresses"
        ordering = ["-is_default", "created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="addresses_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.street}, {self.city} ({self.address_type})"
