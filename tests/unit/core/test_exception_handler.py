"""Unit tests for ``standard_exception_handler``."""

from __future__ import annotations

import pytest
from rest_framework import exceptions as drf_exceptions

from modules.core.authorization import OperationNotPermitted
from modules.core.exception_handler import standard_exception_handler
from modules.directory.exceptions import ReferenceLookupFailed, ReferenceNotFound
from modules.invoices.exceptions import InvoiceAlreadyExists
from modules.orders.exceptions import (
    InvalidOrderData,
    InvalidOrderStatus,
    OrderItemsLocked,
    OrderNotFound,
    OrderNotPaid,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "exc, status_code, code",
    [
        (OrderNotFound("Sales order with ID x not found"), 404, "not_found"),
        (ReferenceNotFound("Customer with ID x not found"), 404, "not_found"),
        (InvalidOrderData("Quantity must be greater than zero"), 400, "invalid_input"),
        (ReferenceLookupFailed("Server error: boom"), 400, "invalid_input"),
        (InvalidOrderStatus("nope"), 409, "illegal_state_transition"),
        (OrderItemsLocked("locked"), 409, "illegal_state_transition"),
        (OrderNotPaid("unpaid"), 409, "conflicting_state"),
        (InvoiceAlreadyExists("dup"), 409, "conflicting_state"),
    ],
)
def test_domain_errors(exc, status_code, code):
    response = standard_exception_handler(exc, {})

    assert response.status_code == status_code
    assert response.data == {
        "type": "client_error",
        "errors": [{"code": code, "detail": exc.message, "attr": None}],
    }


def test_operation_not_permitted():
    response = standard_exception_handler(OperationNotPermitted("no"), {})
    assert response.status_code == 403
    assert response.data["errors"][0]["code"] == "permission_denied"


def test_validation_errors_are_flattened():
    exc = drf_exceptions.ValidationError(
        {"items": [{"quantity": ["A valid integer is required."]}], "shop_id": ["Bad."]}
    )

    response = standard_exception_handler(exc, {})

    assert response.status_code == 400
    assert response.data["type"] == "validation_error"
    attrs = {error["attr"] for error in response.data["errors"]}
    assert attrs == {"items.0.quantity", "shop_id"}


def test_api_exception():
    response = standard_exception_handler(drf_exceptions.NotAuthenticated(), {})
    assert response.status_code == 401
    assert response.data["errors"][0]["code"] == "not_authenticated"


def test_unknown_exceptions_are_left_to_django():
    assert standard_exception_handler(RuntimeError("boom"), {}) is None
