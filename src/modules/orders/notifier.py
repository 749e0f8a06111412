"""Status change notifier (fire-and-forget).

``publish`` defers delivery until the surrounding database transaction
commits, then hands ``(order_id, status)`` to a Celery task.  Nothing in
here may raise into the caller: failures are logged and dropped, and a
rolled-back transaction publishes nothing.
"""

from __future__ import annotations

from functools import partial
from typing import Protocol
from uuid import UUID

import structlog
from django.db import transaction

logger = structlog.get_logger(__name__)


class INotificationSink(Protocol):
    def publish(self, order_id: UUID, status: str) -> None: ...


class OrderStatusPublisher(INotificationSink):
    """Queues order status notifications on the Celery channel."""

    def publish(self, order_id: UUID, status: str) -> None:
        order_ref, status_value = str(order_id), str(status)
        try:
            transaction.on_commit(partial(self._enqueue, order_ref, status_value))
        except Exception:
            logger.exception(
                "notification.publish_failed",
                order_id=order_ref,
                status=status_value,
                stage="register",
            )

    @staticmethod
    def _enqueue(order_id: str, status: str) -> None:
        from modules.orders.tasks import publish_status_change

        try:
            publish_status_change.delay(order_id, status)
        except Exception:
            logger.exception(
                "notification.publish_failed",
                order_id=order_id,
                status=status,
                stage="enqueue",
            )
            return
        logger.info("notification.queued", order_id=order_id, status=status)


status_publisher = OrderStatusPublisher()
