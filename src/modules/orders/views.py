"""Sales order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.  Domain errors
propagate to ``modules.core.exception_handler``, which renders them with
the matching status code; views only parse input, resolve the caller's
``AccessDecision`` and render the result.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import ViewSet

from modules.core.authorization import Authority, decide
from modules.directory.clients import PeerDirectories
from modules.invoices.repositories.django_repository import InvoiceDjangoRepository
from modules.orders.dtos import CreateOrderDTO, OrderItemSpecDTO, UpdateOrderDTO
from modules.orders.filters import ORDER_FILTER_PARAMS
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderItemInputSerializer,
    SalesOrderSerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import OrderService


def bearer_token(request: Request) -> Optional[str]:
    """The caller's raw token, forwarded to the peer directories."""
    return request.auth if isinstance(request.auth, str) else None


def build_order_service(request: Request) -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        invoice_repository=InvoiceDjangoRepository(),
        directories=PeerDirectories.from_settings(token=bearer_token(request)),
    )


def query_filters(request: Request, params: tuple[str, ...]) -> Dict[str, Any]:
    return {
        key: request.query_params[key]
        for key in params
        if request.query_params.get(key) not in (None, "")
    }


def _item_specs(items: Optional[list]) -> Optional[list[OrderItemSpecDTO]]:
    if items is None:
        return None
    return [OrderItemSpecDTO(**item) for item in items]


class SalesOrderViewSet(ViewSet):
    """ViewSet for SalesOrder operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = SalesOrderSerializer

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scopes per action."""
        throttle_scope: str | None
        if self.action in {"create", "confirm"}:
            throttle_scope = "order_mutation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @extend_schema(request=CreateOrderSerializer, responses={201: SalesOrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/sales-orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = CreateOrderDTO(
            customer_id=data.get("customer_id"),
            shop_id=data.get("shop_id"),
            order_date=data.get("order_date"),
            items=_item_specs(data.get("items")),
        )
        order = build_order_service(request).create_order(
            dto, access=decide(request, Authority.CREATE_SALES_ORDER)
        )
        return Response(SalesOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/sales-orders/

        Paginated with ``page`` / ``page_size``; filters: ``status``,
        ``customer``, ``shop``, ``start_date``, ``end_date``,
        ``min_total``, ``max_total``.
        """
        result = build_order_service(request).list_orders(
            request.query_params.get("page"),
            request.query_params.get("page_size"),
            query_filters(request, ORDER_FILTER_PARAMS),
            access=decide(request, Authority.READ_SALES_ORDER),
        )
        results = SalesOrderSerializer(result.items, many=True).data
        return Response(result.to_response_data(results))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/sales-orders/{pk}/"""
        order = build_order_service(request).get_order(
            pk, access=decide(request, Authority.READ_SALES_ORDER)
        )
        return Response(SalesOrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Update / Destroy
    # ------------------------------------------------------------------

    @extend_schema(request=UpdateOrderSerializer, responses=SalesOrderSerializer)
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/sales-orders/{pk}/

        Partial semantics: only the fields sent are applied.
        """
        serializer = UpdateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = UpdateOrderDTO(
            customer_id=data.get("customer_id"),
            shop_id=data.get("shop_id"),
            order_date=data.get("order_date"),
            status=data.get("status"),
            items=_item_specs(data.get("items")),
        )
        order = build_order_service(request).update_order(
            pk, dto, access=decide(request, Authority.UPDATE_SALES_ORDER)
        )
        return Response(SalesOrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/sales-orders/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/sales-orders/{pk}/"""
        build_order_service(request).delete_order(
            pk, access=decide(request, Authority.DELETE_SALES_ORDER)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @extend_schema(request=OrderItemInputSerializer, responses={201: SalesOrderSerializer})
    @action(detail=True, methods=["post"], url_path="items")
    def add_item(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/sales-orders/{pk}/items/"""
        serializer = OrderItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = build_order_service(request).add_order_item(
            pk,
            OrderItemSpecDTO(**serializer.validated_data),
            access=decide(request, Authority.UPDATE_SALES_ORDER),
        )
        return Response(SalesOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=SalesOrderSerializer)
    @action(
        detail=True,
        methods=["delete"],
        url_path=r"items/(?P<item_id>[^/.]+)",
    )
    def delete_item(
        self, request: Request, pk: str | None = None, item_id: str | None = None
    ) -> Response:
        """DELETE /api/v1/sales-orders/{pk}/items/{item_id}/"""
        order = build_order_service(request).delete_order_item(
            pk, item_id, access=decide(request, Authority.UPDATE_SALES_ORDER)
        )
        return Response(SalesOrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Confirm (dedicated action)
    # ------------------------------------------------------------------

    @extend_schema(request=None, responses=SalesOrderSerializer)
    @action(detail=True, methods=["post"])
    def confirm(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/sales-orders/{pk}/confirm/

        Confirms the order once its invoice is PAID.
        """
        order = build_order_service(request).confirm_order_after_payment(
            pk, access=decide(request, Authority.CONFIRM_SALES_ORDER)
        )
        return Response(SalesOrderSerializer(order).data)
