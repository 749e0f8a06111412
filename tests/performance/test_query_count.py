"""Performance regression tests: constant query count (N+1 prevention).

Verifies that the list and retrieve endpoints execute a bounded number
of SQL queries regardless of how many orders and items exist, proving
that ``prefetch_related`` is applied by the repository.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from modules.orders.models import SalesOrder, SalesOrderItem

pytestmark = pytest.mark.integration

URL = "/api/v1/sales-orders/"


def _orders(count: int, items_per_order: int = 3) -> list[SalesOrder]:
    orders = []
    for _ in range(count):
        order = SalesOrder.objects.create(
            customer_id=uuid4(), shop_id=uuid4(), order_date=date(2024, 6, 1)
        )
        for _ in range(items_per_order):
            SalesOrderItem.objects.create(
                order=order,
                product_id=uuid4(),
                quantity=1,
                unit_price=Decimal("10.00"),
            )
        orders.append(order)
    return orders


def _query_count(client, url: str) -> int:
    with CaptureQueriesContext(connection) as context:
        response = client.get(url)
    assert response.status_code == 200
    return len(context.captured_queries)


class TestListQueryCount:
    def test_constant_queries_as_orders_grow(self, auth_client):
        _orders(2)
        small = _query_count(auth_client, URL)

        _orders(8)
        large = _query_count(auth_client, URL)

        assert small == large


class TestRetrieveQueryCount:
    def test_constant_queries_as_items_grow(self, auth_client):
        few = _orders(1, items_per_order=1)[0]
        many = _orders(1, items_per_order=10)[0]

        assert _query_count(auth_client, f"{URL}{few.id}/") == _query_count(
            auth_client, f"{URL}{many.id}/"
        )
