"""Celery tasks for the sales orders module."""

from __future__ import annotations

from uuid import UUID

import structlog
from celery import shared_task

from modules.orders.events import OrderStatusChanged
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="orders.publish_status_change", ignore_result=True)
def publish_status_change(order_id: str, status: str) -> dict:
    """Background consumer of the status notification channel.

    Rebuilds the domain event and fans it out on the in-process bus.
    """
    event = OrderStatusChanged(aggregate_id=UUID(order_id), status=status)
    event_bus.publish(event)
    logger.info("order.status_event_dispatched", order_id=order_id, status=status)
    return event.to_payload()
