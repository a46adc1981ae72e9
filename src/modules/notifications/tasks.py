"""Asynchronous notification tasks.

``send_order_confirmation`` is the idempotent consumer of ``OrderPlaced``;
``relay_outbox_events`` runs on Celery beat and re-enqueues confirmations
whose after-commit dispatch was lost.  Together they give at-least-once
delivery; the consumer claims its ``EmailDelivery`` row before sending,
so at most one email goes out per order.
"""

from __future__ import annotations

from datetime import timedelta
from smtplib import SMTPException
from typing import Optional

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.utils import timezone
from kombu.exceptions import OperationalError

from modules.core.models import OutboxEvent
from modules.notifications.models import EmailDelivery

logger = structlog.get_logger(__name__)

ORDER_PLACED_EVENT = "OrderPlaced"
RELAY_BATCH_SIZE = 100


def order_confirmation_key(order_id: str) -> str:
    return f"order_confirmation:{order_id}"


def _mark_order_placed_published(order_id: str) -> int:
    return OutboxEvent.objects.mark_published(ORDER_PLACED_EVENT, order_id)


@shared_task(
    name="notifications.send_order_confirmation",
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=True,
    retry_jitter=True,
    max_retries=5,
)
def send_order_confirmation(
    order_id: str, email: str, total_price: Optional[str] = None
) -> str:
    """Email the purchaser once per order.

    Returns ``"sent"``, ``"duplicate"`` (already delivered) or
    ``"order_missing"``.
    """
    from modules.orders.models import Order

    order_id = str(order_id)
    key = order_confirmation_key(order_id)
    log = logger.bind(order_id=order_id, dedupe_key=key)

    order = Order.objects.select_related("book", "user").filter(id=order_id).first()
    if order is None:
        log.warning("notification.order_missing")
        return "order_missing"

    recipient = email or order.user.email
    subject = f"Order Confirmation - Book Store (Order #{order_id})"
    book_name = order.book.name if order.book is not None else "your book"
    body = (
        f"Thank you for your order!\n\n"
        f"Order: {order_id}\n"
        f"Book: {book_name}\n"
        f"Quantity: {order.quantity}\n"
        f"Total: {total_price or order.total_price}\n"
    )

    try:
        with transaction.atomic():
            delivery = EmailDelivery.objects.create(
                dedupe_key=key,
                recipient=recipient,
                subject=subject,
                order_id=order.id,
                sent_at=timezone.now(),
            )
    except IntegrityError:
        log.info("notification.duplicate_skipped")
        _mark_order_placed_published(order_id)
        return "duplicate"

    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient])
    except Exception:
        # Release the claim so the retry can send.
        delivery.delete()
        log.warning("notification.send_failed")
        raise

    _mark_order_placed_published(order_id)
    log.info("notification.order_confirmation_sent")
    return "sent"


@shared_task(name="notifications.relay_outbox_events")
def relay_outbox_events() -> int:
    """Re-enqueue ``OrderPlaced`` confirmations that never got consumed.

    Picks ``PENDING`` rows older than ``OUTBOX_RELAY_GRACE_SECONDS`` and
    ``FAILED`` rows with fewer than ``OUTBOX_MAX_RETRIES`` attempts.
    """
    cutoff = timezone.now() - timedelta(seconds=settings.OUTBOX_RELAY_GRACE_SECONDS)
    events = OutboxEvent.objects.relayable(
        ORDER_PLACED_EVENT, cutoff, settings.OUTBOX_MAX_RETRIES
    )[:RELAY_BATCH_SIZE]

    relayed = 0
    for event in events:
        payload = event.payload or {}
        try:
            send_order_confirmation.delay(
                event.aggregate_id,
                payload.get("email", ""),
                payload.get("total_price"),
            )
        except OperationalError as exc:
            logger.warning(
                "outbox.relay_failed",
                event_id=str(event.id),
                aggregate_id=event.aggregate_id,
                error=str(exc),
            )
            event.mark_as_failed(str(exc))
            continue
        relayed += 1

    logger.info("outbox.relay_completed", relayed=relayed)
    return relayed
