"""Django ORM implementation of the SalesOrder repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Methods do
not open their own transactions: the service defines the unit-of-work
boundary and every call here joins it.

Concurrency control on mutations uses ``select_for_update()`` through
``get_for_update``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError

from modules.core.exceptions import InvalidInput
from modules.core.pagination import PageResult, paginate
from modules.orders.filters import OrderFilter
from modules.orders.models import SalesOrder, SalesOrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete SalesOrder repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[SalesOrder]:
        """Retrieve an order with its items prefetched.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return SalesOrder.objects.prefetch_related("items").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[SalesOrder]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside ``transaction.atomic``.  Returns ``None``
        for non-existent or invalid IDs.
        """
        try:
            return (
                SalesOrder.objects.select_for_update()
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list_page(
        self,
        page: int,
        size: int,
        filters: Optional[Dict[str, Any]] = None,
    ) -> PageResult[SalesOrder]:
        """Paginated listing, newest first.

        Supported filter keys: ``status``, ``customer``, ``shop``,
        ``start_date``, ``end_date``, ``min_total``, ``max_total``.
        """
        queryset = SalesOrder.objects.prefetch_related("items")
        if filters:
            filterset = OrderFilter(data=filters, queryset=queryset)
            if not filterset.is_valid():
                raise InvalidInput(f"Invalid filters: {dict(filterset.errors)}")
            queryset = filterset.qs
        return paginate(queryset, page, size)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create(
        self, order: SalesOrder, items: Sequence[SalesOrderItem]
    ) -> SalesOrder:
        order.save()
        for item in items:
            item.order = order
            item.save()
        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return order

    def save(self, entity: SalesOrder) -> SalesOrder:
        """Persist (create or update) an order's own fields."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    def add_item(self, item: SalesOrderItem) -> SalesOrderItem:
        item.save()
        logger.info(
            "order.item_persisted",
            order_id=str(item.order_id),
            item_id=str(item.id),
        )
        return item

    def delete_item(self, item: SalesOrderItem) -> None:
        item_id = str(item.id)
        SalesOrderItem.objects.filter(id=item.id).delete()
        logger.info("order.item_deleted", order_id=str(item.order_id), item_id=item_id)

    def replace_items(
        self,
        order: SalesOrder,
        added: Sequence[SalesOrderItem],
    ) -> None:
        deleted, _ = SalesOrderItem.objects.filter(order_id=order.id).delete()
        for item in added:
            item.save()
        logger.info(
            "order.items_replaced",
            order_id=str(order.id),
            removed=deleted,
            added=len(added),
        )

    def delete(self, entity: SalesOrder) -> None:
        """Hard-delete an order; items go with it (CASCADE)."""
        order_id = str(entity.id)
        entity.delete()
        logger.info("order.deleted", order_id=order_id)
