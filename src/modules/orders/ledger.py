"""Order item ledger.

Owns the in-memory item set of one ``SalesOrder`` while an operation is
running: validates new lines, derives their totals, and keeps the
order's ``total_amount`` equal to the sum of its items.  Persistence is
left to the repository; the ledger never touches the database.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence
from uuid import UUID

import structlog

from modules.orders.constants import MAX_AMOUNT, MAX_QUANTITY, ZERO
from modules.orders.exceptions import InvalidOrderData, OrderItemNotFound
from modules.orders.models import SalesOrder, SalesOrderItem

if TYPE_CHECKING:
    from modules.directory.clients import ProductDirectory
    from modules.orders.dtos import OrderItemSpecDTO

logger = structlog.get_logger(__name__)

MISSING_ITEM_DATA = (
    "Invalid item data: product ID, quantity, and unit price are required"
)


def validate_item_values(quantity: Optional[int], unit_price: Optional[Decimal]) -> None:
    """Raise ``InvalidOrderData`` unless both values are positive and storable."""
    if quantity is None or quantity <= 0:
        raise InvalidOrderData("Quantity must be greater than zero")
    if unit_price is None or unit_price <= 0:
        raise InvalidOrderData("Unit price must be greater than zero")
    if quantity > MAX_QUANTITY:
        raise InvalidOrderData(f"Quantity cannot exceed {MAX_QUANTITY}")
    if unit_price > MAX_AMOUNT:
        raise InvalidOrderData(f"Unit price cannot exceed {MAX_AMOUNT}")


def require_complete_specs(specs: Iterable[OrderItemSpecDTO]) -> None:
    """Reject any spec that lacks product, quantity or unit price."""
    for spec in specs:
        if not spec.is_complete:
            raise InvalidOrderData(MISSING_ITEM_DATA)


def _ensure_total_fits(items: Iterable[SalesOrderItem]) -> None:
    total = sum((item.total_price for item in items), ZERO)
    if total > MAX_AMOUNT:
        raise InvalidOrderData(f"Order total cannot exceed {MAX_AMOUNT}")


class OrderItemLedger:
    """Item set of a single order plus the rules that keep it consistent."""

    def __init__(
        self,
        order: SalesOrder,
        products: ProductDirectory,
        items: Optional[Sequence[SalesOrderItem]] = None,
    ) -> None:
        self.order = order
        self._products = products
        self._items: List[SalesOrderItem] = list(items or [])

    @property
    def items(self) -> List[SalesOrderItem]:
        return list(self._items)

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build_item(self, spec: OrderItemSpecDTO) -> SalesOrderItem:
        """Validate ``spec`` and return an unsaved item with its total set.

        Raises:
            InvalidOrderData: a field is missing or not positive, or the
                item total does not fit the amount column.
            ReferenceNotFound / ReferenceLookupFailed: the product lookup failed.
        """
        if not spec.is_complete:
            raise InvalidOrderData(MISSING_ITEM_DATA)
        self._products.ensure_exists(spec.product_id)
        validate_item_values(spec.quantity, spec.unit_price)

        item = SalesOrderItem(
            order=self.order,
            product_id=spec.product_id,
            quantity=spec.quantity,
            unit_price=spec.unit_price,
        )
        item.total_price = SalesOrderItem.compute_total(spec.quantity, spec.unit_price)
        if item.total_price > MAX_AMOUNT:
            raise InvalidOrderData(f"Item total cannot exceed {MAX_AMOUNT}")
        return item

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, spec: OrderItemSpecDTO) -> SalesOrderItem:
        item = self.build_item(spec)
        _ensure_total_fits([*self._items, item])
        self._items.append(item)
        self.recalculate()
        logger.debug(
            "ledger.item_added",
            order_id=str(self.order.id),
            product_id=str(item.product_id),
            total_price=str(item.total_price),
        )
        return item

    def remove_item(self, item_id: UUID | str) -> SalesOrderItem:
        try:
            wanted = item_id if isinstance(item_id, UUID) else UUID(str(item_id))
        except ValueError:
            wanted = None
        for index, item in enumerate(self._items):
            if wanted is not None and item.id == wanted:
                removed = self._items.pop(index)
                self.recalculate()
                return removed
        raise OrderItemNotFound(
            f"Sales order item with ID {item_id} not found in order {self.order.id}"
        )

    def replace_all_items(
        self, specs: Sequence[OrderItemSpecDTO]
    ) -> tuple[List[SalesOrderItem], List[SalesOrderItem]]:
        """Swap the whole item set for ``specs``; all-or-nothing.

        Every spec is validated and built before the current set is
        touched, so a failure leaves the ledger unchanged.

        Returns:
            ``(removed, added)`` for the repository to persist.
        """
        require_complete_specs(specs)
        new_items = [self.build_item(spec) for spec in specs]
        _ensure_total_fits(new_items)
        removed, self._items = self._items, new_items
        self.recalculate()
        return removed, new_items

    def recalculate(self) -> Decimal:
        """Write the sum of item totals back to the order."""
        return self.order.recalculate_total(self._items)
