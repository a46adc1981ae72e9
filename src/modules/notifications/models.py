"""Delivery log for transactional email.

One row per logical message (``dedupe_key``).  The consumer inserts it
before sending and deletes it if sending fails, so a redelivered or
concurrent task does not email the purchaser twice.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class EmailDelivery(BaseModel):
    dedupe_key = models.CharField(max_length=255, unique=True)
    recipient = models.EmailField(max_length=254)
    subject = models.CharField(max_length=255)
    order_id = models.UUIDField(null=True, blank=True, db_index=True)
    sent_at = models.DateTimeField()

    class Meta:
        db_table = "email_deliveries"
        ordering = ["-sent_at"]

    def __str__(self) -> str:
        return f"{self.dedupe_key} -> {self.recipient}"
