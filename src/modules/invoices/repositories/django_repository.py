"""Django ORM implementation of the Invoice repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError

from modules.core.exceptions import InvalidInput
from modules.core.pagination import PageResult, paginate
from modules.invoices.filters import InvoiceFilter
from modules.invoices.models import Invoice
from modules.invoices.repositories.interfaces import IInvoiceRepository

logger = structlog.get_logger(__name__)


class InvoiceDjangoRepository(IInvoiceRepository):
    """Concrete Invoice repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Invoice]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return Invoice.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_order_id(self, order_id: Any) -> Optional[Invoice]:
        try:
            return Invoice.objects.filter(sales_order_id=order_id).first()
        except (ValueError, ValidationError):
            return None

    def exists_for_order(self, order_id: Any, exclude_id: Any = None) -> bool:
        queryset = Invoice.objects.filter(sales_order_id=order_id)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def list_page(
        self,
        page: int,
        size: int,
        filters: Optional[Dict[str, Any]] = None,
    ) -> PageResult[Invoice]:
        queryset = Invoice.objects.all()
        if filters:
            filterset = InvoiceFilter(data=filters, queryset=queryset)
            if not filterset.is_valid():
                raise InvalidInput(f"Invalid filters: {dict(filterset.errors)}")
            queryset = filterset.qs
        return paginate(queryset, page, size)

    def save(self, entity: Invoice) -> Invoice:
        entity.save()
        logger.info(
            "invoice.saved",
            invoice_id=str(entity.id),
            order_id=str(entity.sales_order_id),
            payment_status=entity.payment_status,
        )
        return entity

    def delete(self, entity: Invoice) -> None:
        invoice_id = str(entity.id)
        entity.delete()
        logger.info("invoice.deleted", invoice_id=invoice_id)
