"""Event handlers for Sales Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    """Relay status changes to observers.

    The broker integration is an external concern; this handler records
    the publication so downstream log shippers can pick it up.
    """

    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.status_event_published",
            order_id=str(event.aggregate_id),
            status=event.status,
            event_id=str(event.event_id),
        )


order_status_changed_handler = OrderStatusChangedHandler()
