"""SalesOrder and SalesOrderItem models.

Invariants carried by the models:
- ``SalesOrder.total_amount`` equals the sum of its items' ``total_price``
  (recomputed by the ledger after every accepted item mutation).
- ``SalesOrderItem.total_price`` is always ``quantity * unit_price``,
  recalculated on save; callers never supply it.
- Items are owned by exactly one order (CASCADE on hard delete).
- Customer, shop and product are references into peer services, stored
  as plain UUIDs (no local foreign keys).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    ITEM_FROZEN_STATES,
    ITEM_MUTABLE_STATES,
    MONEY_PLACES,
    VALID_TRANSITIONS,
    ZERO,
    OrderStatus,
)

logger = structlog.get_logger(__name__)


class SalesOrder(BaseModel):
    """Sales order aggregate root."""

    customer_id: models.UUIDField = models.UUIDField(db_index=True)
    shop_id: models.UUIDField = models.UUIDField(db_index=True)
    order_date: models.DateField = models.DateField(default=timezone.localdate)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.DRAFT,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=ZERO,
    )

    class Meta:
        db_table = "sales_orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="sales_orders_status_idx"),
            models.Index(fields=["-created_at"], name="sales_orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name="sales_orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def accepts_item_changes(self) -> bool:
        """Single-item add/remove is only allowed while DRAFT."""
        return self.status in ITEM_MUTABLE_STATES

    @property
    def items_frozen(self) -> bool:
        return self.status in ITEM_FROZEN_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether the update path may move the order to *new_status*."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def recalculate_total(self, items: Iterable[SalesOrderItem]) -> Decimal:
        """Set ``total_amount`` to the sum of ``items`` and return it."""
        total = sum((item.total_price for item in items), ZERO)
        self.total_amount = total.quantize(MONEY_PLACES)
        return self.total_amount

    def __str__(self) -> str:
        return f"SalesOrder {self.id} ({self.status})"


class SalesOrderItem(BaseModel):
    """One product line on a sales order.

    ``unit_price`` is supplied by the caller at the time the line is added;
    ``total_price`` is derived and recalculated on every save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.SalesOrder",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id: models.UUIDField = models.UUIDField(db_index=True)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "sales_order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="sales_order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gt=0),
                name="sales_order_items_unit_price_positive",
            ),
        ]

    @staticmethod
    def compute_total(quantity: int, unit_price: Decimal) -> Decimal:
        return (unit_price * quantity).quantize(MONEY_PLACES)

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})
        if self.unit_price is not None and self.unit_price <= 0:
            raise ValidationError({"unit_price": "Unit price must be positive."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.total_price = self.compute_total(self.quantity, self.unit_price)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_price" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total_price"]
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} (${self.total_price})"
