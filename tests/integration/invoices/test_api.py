"""Integration tests for the invoice endpoints."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.invoices.models import Invoice
from modules.orders.constants import OrderStatus
from modules.orders.models import SalesOrder

pytestmark = pytest.mark.integration

URL = "/api/v1/invoices/"


def _detail(response):
    return response.json()["errors"][0]["detail"]


def _issue(client, order, invoice_date="2024-06-02"):
    return client.post(
        URL,
        {"sales_order_id": str(order.id), "invoice_date": invoice_date},
        format="json",
    )


class TestCreateInvoice:
    def test_returns_201_and_moves_order_to_pending(self, auth_client, make_order):
        order = make_order()

        response = _issue(auth_client, order)

        assert response.status_code == 201
        data = response.json()
        assert data["sales_order_id"] == str(order.id)
        assert data["payment_status"] == "UNPAID"
        assert data["invoice_date"] == "2024-06-02"
        assert SalesOrder.objects.get(id=order.id).status == OrderStatus.PENDING

    def test_missing_fields_are_400(self, auth_client):
        response = auth_client.post(URL, {}, format="json")

        assert response.status_code == 400
        attrs = {error["attr"] for error in response.json()["errors"]}
        assert attrs == {"sales_order_id", "invoice_date"}

    def test_unknown_order_is_404(self, auth_client):
        response = auth_client.post(
            URL,
            {"sales_order_id": str(uuid4()), "invoice_date": "2024-06-02"},
            format="json",
        )
        assert response.status_code == 404

    def test_duplicate_is_409(self, auth_client, make_order):
        order = make_order()
        _issue(auth_client, order)

        response = _issue(auth_client, order)

        assert response.status_code == 409
        assert _detail(response) == f"Invoice for sales order ID {order.id} already exists"

    def test_cancelled_order_is_409(self, auth_client, make_order):
        order = make_order()
        SalesOrder.objects.filter(id=order.id).update(status=OrderStatus.CANCELLED)

        response = _issue(auth_client, order)

        assert response.status_code == 409
        assert _detail(response) == (
            f"Cannot create invoice for cancelled sales order with ID {order.id}"
        )

    def test_confirmed_order_leaves_no_invoice(self, auth_client, make_order):
        order = make_order()
        SalesOrder.objects.filter(id=order.id).update(status=OrderStatus.CONFIRMED)

        response = _issue(auth_client, order)

        assert response.status_code == 409
        assert not Invoice.objects.exists()


class TestReadInvoices:
    def test_retrieve(self, auth_client, make_order):
        invoice_id = _issue(auth_client, make_order()).json()["id"]

        response = auth_client.get(f"{URL}{invoice_id}/")

        assert response.status_code == 200
        assert response.json()["id"] == invoice_id

    def test_retrieve_unknown(self, auth_client):
        missing = uuid4()
        response = auth_client.get(f"{URL}{missing}/")
        assert response.status_code == 404
        assert _detail(response) == f"Invoice with ID {missing} not found"

    def test_list_with_filter(self, auth_client, make_order):
        paid_id = _issue(auth_client, make_order()).json()["id"]
        _issue(auth_client, make_order())
        auth_client.patch(f"{URL}{paid_id}/", {"payment_status": "PAID"}, format="json")

        data = auth_client.get(URL, {"payment_status": "PAID"}).json()

        assert data["count"] == 1
        assert data["results"][0]["id"] == paid_id


class TestUpdateAndDeleteInvoice:
    def test_retarget(self, auth_client, make_order):
        invoice_id = _issue(auth_client, make_order()).json()["id"]
        other = make_order()

        response = auth_client.put(
            f"{URL}{invoice_id}/", {"sales_order_id": str(other.id)}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["sales_order_id"] == str(other.id)

    def test_retarget_to_cancelled_order(self, auth_client, make_order):
        invoice_id = _issue(auth_client, make_order()).json()["id"]
        other = make_order()
        SalesOrder.objects.filter(id=other.id).update(status=OrderStatus.CANCELLED)

        response = auth_client.patch(
            f"{URL}{invoice_id}/", {"sales_order_id": str(other.id)}, format="json"
        )

        assert response.status_code == 409

    def test_invalid_payment_status(self, auth_client, make_order):
        invoice_id = _issue(auth_client, make_order()).json()["id"]
        response = auth_client.patch(
            f"{URL}{invoice_id}/", {"payment_status": "LOST"}, format="json"
        )
        assert response.status_code == 400

    def test_delete(self, auth_client, make_order):
        invoice_id = _issue(auth_client, make_order()).json()["id"]

        response = auth_client.delete(f"{URL}{invoice_id}/")

        assert response.status_code == 204
        assert not Invoice.objects.filter(id=invoice_id).exists()

    def test_delete_unknown(self, auth_client):
        assert auth_client.delete(f"{URL}{uuid4()}/").status_code == 404
