"""Invoice service layer (Use Cases).

Issuing an invoice drives its sales order to PENDING through the order
service's update path.  Both writes share one transaction, so either the
invoice exists and the order is PENDING, or neither changed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.authorization import AccessDecision
from modules.core.pagination import PageResult
from modules.invoices.constants import PaymentStatus
from modules.invoices.exceptions import (
    InvoiceAlreadyExists,
    InvoiceNotFound,
    OrderNotInvoiceable,
)
from modules.invoices.models import Invoice
from modules.orders.constants import OrderStatus
from modules.orders.dtos import UpdateOrderDTO
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.invoices.dtos import CreateInvoiceDTO, UpdateInvoiceDTO
    from modules.invoices.repositories.interfaces import IInvoiceRepository
    from modules.orders.models import SalesOrder
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)


class InvoiceService:
    """Application service for Invoice use-cases."""

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        order_repository: IOrderRepository,
        order_service: OrderService,
    ) -> None:
        self._invoice_repo = invoice_repository
        self._order_repo = order_repository
        self._order_service = order_service

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_invoice(
        self,
        dto: CreateInvoiceDTO,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> Invoice:
        """Issue an UNPAID invoice and move the order to PENDING.

        Raises:
            OrderNotFound: the sales order does not exist.
            OrderNotInvoiceable: the sales order is CANCELLED.
            InvoiceAlreadyExists: the sales order already has an invoice.
            InvalidOrderStatus: the order cannot move to PENDING.
        """
        access.ensure_granted()

        order_id = dto.sales_order_id
        order = self._lock_order(order_id)
        if order.status == OrderStatus.CANCELLED:
            raise OrderNotInvoiceable(
                f"Cannot create invoice for cancelled sales order with ID {order_id}"
            )
        if self._invoice_repo.exists_for_order(order.id):
            raise InvoiceAlreadyExists(
                f"Invoice for sales order ID {order_id} already exists"
            )

        invoice = Invoice(
            sales_order_id=order.id,
            invoice_date=dto.invoice_date or timezone.localdate(),
            payment_status=PaymentStatus.UNPAID,
        )
        self._invoice_repo.save(invoice)

        self._order_service.update_order(
            order.id, UpdateOrderDTO(status=OrderStatus.PENDING)
        )
        logger.info(
            "invoice.created",
            invoice_id=str(invoice.id),
            order_id=str(order.id),
        )
        return invoice

    @transaction.atomic
    def update_invoice(
        self,
        invoice_id: UUID,
        dto: UpdateInvoiceDTO,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> Invoice:
        """Re-target, re-date or change the payment status of an invoice.

        Raises:
            InvoiceNotFound: the invoice does not exist.
            OrderNotFound: the new sales order does not exist.
            OrderNotInvoiceable: the given sales order is CANCELLED.
            InvoiceAlreadyExists: the new sales order already has another invoice.
        """
        access.ensure_granted()

        invoice = self.get_invoice(invoice_id)
        log = logger.bind(invoice_id=str(invoice.id))

        if dto.sales_order_id is not None:
            order = self._lock_order(dto.sales_order_id)
            if order.status == OrderStatus.CANCELLED:
                raise OrderNotInvoiceable(
                    "Cannot update invoice to use cancelled sales order "
                    f"with ID {dto.sales_order_id}"
                )
            if self._invoice_repo.exists_for_order(order.id, exclude_id=invoice.id):
                raise InvoiceAlreadyExists(
                    f"Invoice for sales order ID {dto.sales_order_id} already exists"
                )
            if order.id != invoice.sales_order_id:
                log.info(
                    "invoice.retargeted",
                    old_order_id=str(invoice.sales_order_id),
                    new_order_id=str(order.id),
                )
                invoice.sales_order_id = order.id
        if dto.invoice_date is not None:
            invoice.invoice_date = dto.invoice_date
        if dto.payment_status is not None:
            invoice.payment_status = dto.payment_status

        self._invoice_repo.save(invoice)
        log.info("invoice.updated", payment_status=invoice.payment_status)
        return invoice

    @transaction.atomic
    def delete_invoice(
        self,
        invoice_id: UUID,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> None:
        """Raises ``InvoiceNotFound`` if the invoice does not exist."""
        access.ensure_granted()
        invoice = self.get_invoice(invoice_id)
        self._invoice_repo.delete(invoice)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_invoice(
        self,
        invoice_id: UUID,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> Invoice:
        access.ensure_granted()
        invoice = self._invoice_repo.get_by_id(invoice_id)
        if not invoice:
            raise InvoiceNotFound(f"Invoice with ID {invoice_id} not found")
        return invoice

    def list_invoices(
        self,
        page: int,
        size: int,
        filters: Optional[Dict[str, Any]] = None,
        *,
        access: AccessDecision = AccessDecision.system(),
    ) -> PageResult[Invoice]:
        access.ensure_granted()
        return self._invoice_repo.list_page(page, size, filters)

    def _lock_order(self, order_id: UUID) -> SalesOrder:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Sales order with ID {order_id} not found")
        return order
