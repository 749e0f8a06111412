"""Invoice model.

An invoice is issued against exactly one sales order.  The one-to-one
link enforces "at most one invoice per order" at the database level and
``PROTECT`` keeps an invoiced order from being deleted underneath it.
``payment_status`` is owned by the external billing process; the order
engine only reads it.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.invoices.constants import PaymentStatus


class Invoice(BaseModel):
    sales_order: models.OneToOneField = models.OneToOneField(
        "orders.SalesOrder",
        on_delete=models.PROTECT,
        related_name="invoice",
    )
    invoice_date: models.DateField = models.DateField()
    payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )

    class Meta:
        db_table = "invoices"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["payment_status"], name="invoices_payment_status_idx"),
        ]

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def __str__(self) -> str:
        return f"Invoice {self.id} for {self.sales_order_id} ({self.payment_status})"
