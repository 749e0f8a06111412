"""Invoice API views.

Exposes the ``InvoiceService`` via HTTP.  Domain errors are rendered by
``modules.core.exception_handler``.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.authorization import Authority, decide
from modules.invoices.dtos import CreateInvoiceDTO, UpdateInvoiceDTO
from modules.invoices.filters import INVOICE_FILTER_PARAMS
from modules.invoices.repositories.django_repository import InvoiceDjangoRepository
from modules.invoices.serializers import (
    CreateInvoiceSerializer,
    InvoiceSerializer,
    UpdateInvoiceSerializer,
)
from modules.invoices.services import InvoiceService
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.views import build_order_service, query_filters


def build_invoice_service(request: Request) -> InvoiceService:
    return InvoiceService(
        invoice_repository=InvoiceDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        order_service=build_order_service(request),
    )


class InvoiceViewSet(ViewSet):
    """ViewSet for Invoice CRUD operations."""

    serializer_class = InvoiceSerializer

    @extend_schema(request=CreateInvoiceSerializer, responses={201: InvoiceSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/invoices/

        Issues an UNPAID invoice and moves the sales order to PENDING.
        """
        serializer = CreateInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = build_invoice_service(request).create_invoice(
            CreateInvoiceDTO(**serializer.validated_data),
            access=decide(request, Authority.CREATE_INVOICE),
        )
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def list(self, request: Request) -> Response:
        """GET /api/v1/invoices/ (filters: ``payment_status``, ``sales_order``)."""
        result = build_invoice_service(request).list_invoices(
            request.query_params.get("page"),
            request.query_params.get("page_size"),
            query_filters(request, INVOICE_FILTER_PARAMS),
            access=decide(request, Authority.READ_INVOICE),
        )
        results = InvoiceSerializer(result.items, many=True).data
        return Response(result.to_response_data(results))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/invoices/{pk}/"""
        invoice = build_invoice_service(request).get_invoice(
            pk, access=decide(request, Authority.READ_INVOICE)
        )
        return Response(InvoiceSerializer(invoice).data)

    @extend_schema(request=UpdateInvoiceSerializer, responses=InvoiceSerializer)
    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/invoices/{pk}/"""
        serializer = UpdateInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invoice = build_invoice_service(request).update_invoice(
            pk,
            UpdateInvoiceDTO(**serializer.validated_data),
            access=decide(request, Authority.UPDATE_INVOICE),
        )
        return Response(InvoiceSerializer(invoice).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/invoices/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/invoices/{pk}/"""
        build_invoice_service(request).delete_invoice(
            pk, access=decide(request, Authority.DELETE_INVOICE)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
