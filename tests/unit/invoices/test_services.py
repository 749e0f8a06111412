"""Unit tests for ``InvoiceService``."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest

from modules.invoices.constants import PaymentStatus
from modules.invoices.dtos import CreateInvoiceDTO, UpdateInvoiceDTO
from modules.invoices.exceptions import (
    InvoiceAlreadyExists,
    InvoiceNotFound,
    OrderNotInvoiceable,
)
from modules.invoices.models import Invoice
from modules.orders.constants import OrderStatus
from modules.orders.dtos import UpdateOrderDTO
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderNotDeletable,
    OrderNotFound,
)
from modules.orders.models import SalesOrder

pytestmark = pytest.mark.unit


def _set_status(order, status):
    SalesOrder.objects.filter(id=order.id).update(status=status)


class TestCreateInvoice:
    def test_issues_unpaid_invoice_and_moves_order_to_pending(
        self, invoice_service, make_order, notifier
    ):
        order = make_order()

        invoice = invoice_service.create_invoice(
            CreateInvoiceDTO(sales_order_id=order.id, invoice_date=date(2024, 5, 1))
        )

        assert invoice.payment_status == PaymentStatus.UNPAID
        assert invoice.invoice_date == date(2024, 5, 1)
        assert invoice.sales_order_id == order.id
        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert notifier.published == [(order.id, "PENDING")]

    def test_invoice_date_defaults_to_today(self, invoice_service, make_order):
        order = make_order()
        invoice = invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))
        assert invoice.invoice_date is not None

    def test_unknown_order(self, invoice_service):
        missing = uuid4()
        with pytest.raises(OrderNotFound, match=f"Sales order with ID {missing} not found"):
            invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=missing))

    def test_cancelled_order(self, invoice_service, make_order):
        order = make_order()
        _set_status(order, OrderStatus.CANCELLED)

        with pytest.raises(
            OrderNotInvoiceable,
            match=f"Cannot create invoice for cancelled sales order with ID {order.id}",
        ):
            invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))
        assert Invoice.objects.count() == 0

    def test_second_invoice_for_same_order(self, invoice_service, make_order):
        order = make_order()
        invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))

        with pytest.raises(
            InvoiceAlreadyExists,
            match=f"Invoice for sales order ID {order.id} already exists",
        ):
            invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))
        assert Invoice.objects.count() == 1

    def test_confirmed_order_rolls_back_the_invoice(self, invoice_service, make_order):
        order = make_order()
        _set_status(order, OrderStatus.CONFIRMED)

        with pytest.raises(InvalidOrderStatus):
            invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))

        assert Invoice.objects.count() == 0
        order.refresh_from_db()
        assert order.status == OrderStatus.CONFIRMED


class TestUpdateInvoice:
    @pytest.fixture()
    def invoice(self, invoice_service, make_order):
        order = make_order()
        return invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))

    def test_payment_status(self, invoice_service, invoice):
        updated = invoice_service.update_invoice(
            invoice.id, UpdateInvoiceDTO(payment_status=PaymentStatus.PAID)
        )
        assert updated.payment_status == PaymentStatus.PAID
        assert updated.is_paid

    def test_invoice_date(self, invoice_service, invoice):
        updated = invoice_service.update_invoice(
            invoice.id, UpdateInvoiceDTO(invoice_date=date(2024, 12, 31))
        )
        assert updated.invoice_date == date(2024, 12, 31)

    def test_empty_update_changes_nothing(self, invoice_service, invoice):
        updated = invoice_service.update_invoice(invoice.id, UpdateInvoiceDTO())
        assert updated.payment_status == PaymentStatus.UNPAID
        assert updated.sales_order_id == invoice.sales_order_id

    def test_retarget_to_another_order(self, invoice_service, invoice, make_order):
        other = make_order()
        updated = invoice_service.update_invoice(
            invoice.id, UpdateInvoiceDTO(sales_order_id=other.id)
        )
        assert updated.sales_order_id == other.id

    def test_retarget_to_cancelled_order(self, invoice_service, invoice, make_order):
        other = make_order()
        _set_status(other, OrderStatus.CANCELLED)

        with pytest.raises(
            OrderNotInvoiceable,
            match=f"Cannot update invoice to use cancelled sales order with ID {other.id}",
        ):
            invoice_service.update_invoice(
                invoice.id, UpdateInvoiceDTO(sales_order_id=other.id)
            )

    def test_retarget_to_invoiced_order(self, invoice_service, invoice, make_order):
        other = make_order()
        invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=other.id))

        with pytest.raises(InvoiceAlreadyExists):
            invoice_service.update_invoice(
                invoice.id, UpdateInvoiceDTO(sales_order_id=other.id)
            )

    def test_retarget_to_unknown_order(self, invoice_service, invoice):
        with pytest.raises(OrderNotFound):
            invoice_service.update_invoice(
                invoice.id, UpdateInvoiceDTO(sales_order_id=uuid4())
            )

    def test_same_order_is_not_a_conflict(self, invoice_service, invoice):
        updated = invoice_service.update_invoice(
            invoice.id, UpdateInvoiceDTO(sales_order_id=invoice.sales_order_id)
        )
        assert updated.sales_order_id == invoice.sales_order_id

    def test_same_order_rechecked_once_cancelled(self, invoice_service, invoice):
        order_id = invoice.sales_order_id
        SalesOrder.objects.filter(id=order_id).update(status=OrderStatus.CANCELLED)

        with pytest.raises(
            OrderNotInvoiceable,
            match=f"Cannot update invoice to use cancelled sales order with ID {order_id}",
        ):
            invoice_service.update_invoice(
                invoice.id,
                UpdateInvoiceDTO(sales_order_id=order_id, payment_status=PaymentStatus.PAID),
            )

        invoice.refresh_from_db()
        assert invoice.payment_status == PaymentStatus.UNPAID

    def test_unknown_invoice(self, invoice_service):
        with pytest.raises(InvoiceNotFound):
            invoice_service.update_invoice(uuid4(), UpdateInvoiceDTO())


class TestDeleteAndQueries:
    def test_delete(self, invoice_service, make_order):
        order = make_order()
        invoice = invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))

        invoice_service.delete_invoice(invoice.id)

        assert not Invoice.objects.filter(id=invoice.id).exists()
        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_deleting_invoice_leaves_order_pending(
        self, invoice_service, order_service, make_order
    ):
        order = make_order()
        invoice = invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))
        invoice_service.delete_invoice(invoice.id)

        with pytest.raises(OrderNotDeletable, match="Only DRAFT orders can be deleted"):
            order_service.delete_order(order.id)

        order_service.update_order(order.id, UpdateOrderDTO(status=OrderStatus.DRAFT))
        order_service.delete_order(order.id)
        assert not SalesOrder.objects.filter(id=order.id).exists()

    def test_get_unknown(self, invoice_service):
        missing = uuid4()
        with pytest.raises(InvoiceNotFound, match=f"Invoice with ID {missing} not found"):
            invoice_service.get_invoice(missing)

    def test_list_filters_by_payment_status(self, invoice_service, make_order):
        paid = invoice_service.create_invoice(
            CreateInvoiceDTO(sales_order_id=make_order().id)
        )
        invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=make_order().id))
        invoice_service.update_invoice(
            paid.id, UpdateInvoiceDTO(payment_status=PaymentStatus.PAID)
        )

        page = invoice_service.list_invoices(1, 10, {"payment_status": "PAID"})

        assert [invoice.id for invoice in page.items] == [paid.id]
        assert page.total_items == 1

    def test_list_filters_by_sales_order(self, invoice_service, make_order):
        order = make_order()
        target = invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=order.id))
        invoice_service.create_invoice(CreateInvoiceDTO(sales_order_id=make_order().id))

        page = invoice_service.list_invoices(1, 10, {"sales_order": str(order.id)})

        assert [invoice.id for invoice in page.items] == [target.id]
