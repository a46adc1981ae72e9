"""Notification Dispatcher: hands order confirmations to Celery.

Called after the order transaction commits.  A broker outage is logged
and swallowed here; the ``OrderPlaced`` outbox row is still pending, so
``relay_outbox_events`` will enqueue the email later.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

import structlog
from kombu.exceptions import OperationalError

from modules.notifications.tasks import send_order_confirmation

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    def __init__(self, task: Optional[Any] = None) -> None:
        self._task = task or send_order_confirmation

    def notify_order_placed(
        self,
        order_id: UUID,
        email: str = "",
        total_price: Optional[str] = None,
    ) -> None:
        log = logger.bind(order_id=str(order_id))
        try:
            self._task.delay(str(order_id), email, total_price)
        except OperationalError as exc:
            log.warning("notification.dispatch_failed", error=str(exc))
            return
        log.info("notification.order_confirmation_enqueued")
