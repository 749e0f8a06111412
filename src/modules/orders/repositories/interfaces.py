"""Sales order repository interface.

Extends ``IRepository[SalesOrder]`` with the operations the lifecycle
engine needs on the aggregate: row-locked loads and item persistence.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import SalesOrder, SalesOrderItem


class IOrderRepository(IRepository["SalesOrder"]):
    """Repository contract for the SalesOrder aggregate root.

    The aggregate includes its SalesOrderItem children.  Mutations must
    run inside the caller's transaction.
    """

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[SalesOrder]:
        """Retrieve an order with a row-level lock and prefetched items."""

    @abstractmethod
    def create(
        self, order: SalesOrder, items: Sequence[SalesOrderItem]
    ) -> SalesOrder:
        """Insert a new order together with its initial items."""

    @abstractmethod
    def add_item(self, item: SalesOrderItem) -> SalesOrderItem:
        """Persist a single new item."""

    @abstractmethod
    def delete_item(self, item: SalesOrderItem) -> None:
        """Remove a single item."""

    @abstractmethod
    def replace_items(
        self,
        order: SalesOrder,
        added: Sequence[SalesOrderItem],
    ) -> None:
        """Delete every stored item of ``order`` and insert ``added``."""
