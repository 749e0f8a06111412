"""Invoice DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.invoices.constants import PaymentStatus


class CreateInvoiceDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    sales_order_id: UUID
    invoice_date: Optional[date] = None


class UpdateInvoiceDTO(BaseModel):
    """Partial update; ``None`` fields are left untouched."""

    model_config = ConfigDict(frozen=True)

    sales_order_id: Optional[UUID] = None
    invoice_date: Optional[date] = None
    payment_status: Optional[PaymentStatus] = None

