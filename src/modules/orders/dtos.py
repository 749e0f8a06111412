"""Sales order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are
the contracts between the API layer (DRF serializers) and the Service
layer.  DTOs are immutable (``frozen=True``).

Input DTOs only check *types*.  Presence and positivity of item fields
are business rules enforced by the order ledger, so a DTO built by a
non-HTTP caller gets exactly the same validation as an API request.

- ``OrderItemSpecDTO``: one line item (create, update, add-item).
- ``CreateOrderDTO``: input for order creation (nested items).
- ``UpdateOrderDTO``: partial update; ``items=None`` means "leave items
  alone", ``items=[]`` means "remove every item".
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.orders.constants import OrderStatus


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderItemSpecDTO(BaseModel):
    """Immutable description of a line item to be created."""

    model_config = ConfigDict(frozen=True)

    product_id: Optional[UUID] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.product_id, self.quantity, self.unit_price)


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests."""

    model_config = ConfigDict(frozen=True)

    customer_id: Optional[UUID] = None
    shop_id: Optional[UUID] = None
    order_date: Optional[date] = None
    items: Optional[List[OrderItemSpecDTO]] = None


class UpdateOrderDTO(BaseModel):
    """Immutable DTO for partial order updates."""

    model_config = ConfigDict(frozen=True)

    customer_id: Optional[UUID] = None
    shop_id: Optional[UUID] = None
    order_date: Optional[date] = None
    status: Optional[OrderStatus] = None
    items: Optional[List[OrderItemSpecDTO]] = None

