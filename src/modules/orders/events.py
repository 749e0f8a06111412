"""Domain events for the Sales Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Broadcast after an accepted change to a sales order.

    Carries the status the order had once the change was committed.
    Consumers treat the latest observed status as authoritative.
    """

    status: str = ""
