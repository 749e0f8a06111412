"""Order service layer (Use Cases).

Orchestrates the sales order lifecycle: creation, partial updates with
status transitions, single-item edits, payment-gated confirmation and
deletion.  All write operations are atomic: the service defines the
unit-of-work boundary, locks the order row before mutating it, and only
publishes a status notification once the transaction commits.

Every public operation receives an ``AccessDecision`` already resolved
by the transport and refuses to run unless it is granted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.authorization import AccessDecision
from modules.core.pagination import PageResult
from modules.orders.constants import (
    TRANSITION_REJECTIONS,
    OrderStatus,
)
from modules.orders.exceptions import (
    InvalidOrderData,
    InvalidOrderStatus,
    OrderAlreadyConfirmed,
    OrderItemsLocked,
    OrderNotDeletable,
    OrderNotFound,
    OrderNotPaid,
)
from modules.orders.ledger import OrderItemLedger, require_complete_specs
from modules.orders.models import SalesOrder
from modules.orders.notifier import status_publisher

if TYPE_CHECKING:
    from modules.directory.clients import PeerDirectories
    from modules.invoices.repositories.interfaces import IInvoiceRepository
    from modules.orders.dtos import CreateOrderDTO, OrderItemSpecDTO, UpdateOrderDTO
    from modules.orders.notifier import INotificationSink
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _status_label(status: str) -> str:
    return str(status).lower()


class OrderService:
    """Application service for SalesOrder use-cases.

    Receives its stores, peer directories and notifier via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        invoice_repository: IInvoiceRepository,
        directories: PeerDirectories,
        notifier: INotificationSink = status_publisher,
    ) -> None:
        self._order_repo = order_repository
        self._invoice_repo = invoice_repository
        self._directories = directories
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(
        self,
        dto: CreateOrderDTO,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> SalesOrder:
        """Create a new DRAFT order, optionally with initial items.

        Steps:
        1. Require customer, shop and complete item data.
        2. Resolve customer and shop in their directories.
        3. Resolve each product and validate quantity / unit price.
        4. Persist order + items; total is the sum of the items.

        No notification is published for a freshly created draft.

        Raises:
            InvalidOrderData: missing ids or invalid item data.
            ReferenceNotFound / ReferenceLookupFailed: a peer lookup failed.
        """
        access.ensure_granted()

        if dto.customer_id is None:
            raise InvalidOrderData("Customer ID is required")
        if dto.shop_id is None:
            raise InvalidOrderData("Shop ID is required")
        require_complete_specs(dto.items or [])

        log = logger.bind(customer_id=str(dto.customer_id), shop_id=str(dto.shop_id))
        log.info("order.creation_started")

        self._directories.customers.ensure_exists(dto.customer_id)
        self._directories.shops.ensure_exists(dto.shop_id)

        order = SalesOrder(
            customer_id=dto.customer_id,
            shop_id=dto.shop_id,
            order_date=dto.order_date or timezone.localdate(),
            status=OrderStatus.DRAFT,
        )
        ledger = OrderItemLedger(order, self._directories.products)
        for spec in dto.items or []:
            ledger.add_item(spec)
        ledger.recalculate()

        self._order_repo.create(order, ledger.items)
        log.info(
            "order.created",
            order_id=str(order.id),
            item_count=len(ledger.items),
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def update_order(
        self,
        order_id: UUID,
        dto: UpdateOrderDTO,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> SalesOrder:
        """Apply a partial update to an order.

        Only the fields present on ``dto`` are touched.  When ``items``
        is present (even empty) the whole item set is replaced; the
        replacement is validated in full before anything is removed.
        A notification is published after every accepted update.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderData: incomplete or non-positive item data.
            InvalidOrderStatus: the status transition is not allowed.
            OrderItemsLocked: items sent for a CONFIRMED/CANCELLED order.
            ReferenceNotFound / ReferenceLookupFailed: a peer lookup failed.
        """
        access.ensure_granted()

        if dto.items is not None:
            require_complete_specs(dto.items)

        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order.id), current_status=order.status)
        original_status = order.status
        items_locked = order.items_frozen

        if dto.customer_id is not None:
            self._directories.customers.ensure_exists(dto.customer_id)
            order.customer_id = dto.customer_id
        if dto.shop_id is not None:
            self._directories.shops.ensure_exists(dto.shop_id)
            order.shop_id = dto.shop_id
        if dto.order_date is not None:
            order.order_date = dto.order_date

        if dto.status is not None:
            self._check_transition(order, dto.status)
            if dto.status == OrderStatus.CONFIRMED and original_status != OrderStatus.CONFIRMED:
                log.warning("order.confirmed_without_payment_check")
            order.status = dto.status

        if dto.items is not None:
            if items_locked:
                log.warning("order.items_locked", operation="replace")
                raise OrderItemsLocked(
                    f"Cannot modify items of a {_status_label(original_status)} order"
                )
            ledger = OrderItemLedger(
                order, self._directories.products, order.items.all()
            )
            _, added = ledger.replace_all_items(dto.items)
            self._order_repo.replace_items(order, added)

        self._order_repo.save(order)
        log.info(
            "order.updated",
            new_status=order.status,
            total_amount=str(order.total_amount),
        )
        self._notifier.publish(order.id, order.status)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def add_order_item(
        self,
        order_id: UUID,
        spec: OrderItemSpecDTO,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> SalesOrder:
        """Append one item to a DRAFT order and recompute its total.

        Raises:
            OrderNotFound: order does not exist.
            OrderItemsLocked: order is PENDING, CONFIRMED or CANCELLED.
            InvalidOrderData: incomplete or non-positive item data.
            ReferenceNotFound / ReferenceLookupFailed: product lookup failed.
        """
        access.ensure_granted()

        order = self._lock_order(order_id)
        if not order.accepts_item_changes:
            logger.warning(
                "order.items_locked",
                order_id=str(order.id),
                status=order.status,
                operation="add",
            )
            raise OrderItemsLocked(
                f"Cannot add items to a {_status_label(order.status)} order"
            )

        ledger = OrderItemLedger(order, self._directories.products, order.items.all())
        item = ledger.add_item(spec)
        self._order_repo.add_item(item)
        self._order_repo.save(order)

        logger.info(
            "order.item_added",
            order_id=str(order.id),
            item_id=str(item.id),
            total_amount=str(order.total_amount),
        )
        self._notifier.publish(order.id, order.status)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def delete_order_item(
        self,
        order_id: UUID,
        item_id: UUID,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> SalesOrder:
        """Remove one item from a DRAFT order and recompute its total.

        Raises:
            OrderNotFound: order does not exist.
            OrderItemsLocked: order is PENDING, CONFIRMED or CANCELLED.
            OrderItemNotFound: the item is not part of the order.
        """
        access.ensure_granted()

        order = self._lock_order(order_id)
        if not order.accepts_item_changes:
            logger.warning(
                "order.items_locked",
                order_id=str(order.id),
                status=order.status,
                operation="delete",
            )
            raise OrderItemsLocked(
                f"Cannot delete items from a {_status_label(order.status)} order"
            )

        ledger = OrderItemLedger(order, self._directories.products, order.items.all())
        removed = ledger.remove_item(item_id)
        self._order_repo.delete_item(removed)
        self._order_repo.save(order)

        logger.info(
            "order.item_removed",
            order_id=str(order.id),
            item_id=str(item_id),
            total_amount=str(order.total_amount),
        )
        self._notifier.publish(order.id, order.status)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def confirm_order_after_payment(
        self,
        order_id: UUID,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> SalesOrder:
        """Move an order to CONFIRMED once its invoice is fully paid.

        Raises:
            OrderNotFound: order does not exist.
            OrderNotPaid: no invoice, or the invoice is not PAID.
            OrderAlreadyConfirmed: the order is already CONFIRMED.
            InvalidOrderStatus: the order is CANCELLED.
        """
        access.ensure_granted()

        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order.id), current_status=order.status)

        invoice = self._invoice_repo.get_by_order_id(order.id)
        if invoice is None:
            log.warning("order.confirm_without_invoice")
            raise OrderNotPaid(f"No invoice found for sales order {order.id}")
        if not invoice.is_paid:
            log.warning("order.confirm_unpaid", payment_status=invoice.payment_status)
            raise OrderNotPaid(
                f"Invoice for sales order {order.id} is not fully paid. "
                f"Current status: {invoice.payment_status}"
            )
        if order.status == OrderStatus.CONFIRMED:
            raise OrderAlreadyConfirmed(f"Sales order {order.id} is already confirmed")
        if order.status == OrderStatus.CANCELLED:
            raise InvalidOrderStatus(TRANSITION_REJECTIONS[OrderStatus.CANCELLED])

        order.status = OrderStatus.CONFIRMED
        order.recalculate_total(order.items.all())
        self._order_repo.save(order)

        log.info("order.confirmed", invoice_id=str(invoice.id))
        self._notifier.publish(order.id, order.status)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def delete_order(
        self,
        order_id: UUID,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> None:
        """Hard-delete a DRAFT order that was never invoiced.

        Raises:
            OrderNotFound: order does not exist.
            OrderNotDeletable: the order is invoiced or not a draft.
        """
        access.ensure_granted()

        order = self._lock_order(order_id)
        if self._invoice_repo.exists_for_order(order.id):
            raise OrderNotDeletable("Cannot delete sales order with associated invoices")
        if order.status != OrderStatus.DRAFT:
            raise OrderNotDeletable("Only DRAFT orders can be deleted")

        self._order_repo.delete(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(
        self,
        order_id: UUID,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> SalesOrder:
        """Retrieve a single order with its items.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        access.ensure_granted()
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Sales order with ID {order_id} not found")
        return order

    def list_orders(
        self,
        page: int,
        size: int,
        filters: Optional[Dict[str, Any]] = None,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> PageResult[SalesOrder]:
        """Return one page of orders, newest first, optionally filtered."""
        access.ensure_granted()
        return self._order_repo.list_page(page, size, filters)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_order(self, order_id: UUID) -> SalesOrder:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Sales order with ID {order_id} not found")
        return order

    @staticmethod
    def _check_transition(order: SalesOrder, new_status: str) -> None:
        if order.can_transition_to(new_status):
            return
        logger.warning(
            "order.invalid_transition",
            order_id=str(order.id),
            current_status=order.status,
            new_status=new_status,
        )
        raise InvalidOrderStatus(
            TRANSITION_REJECTIONS.get(
                order.status,
                f"Cannot transition from {order.status} to {new_status}",
            )
        )
