"""Sales order domain constants.

Defines status choices and the transitions accepted by the generic
update path of the order state machine.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    CANCELLED = "CANCELLED", "Cancelled"


# Transitions accepted by ``update_order``.  Same-state updates of a
# non-terminal order are no-ops.  DRAFT/PENDING -> CONFIRMED is allowed
# here; ``confirm_order_after_payment`` is the payment-gated path.
VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.DRAFT: {
        OrderStatus.DRAFT,
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PENDING: {
        OrderStatus.DRAFT,
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
}

TRANSITION_REJECTIONS: dict[str, str] = {
    OrderStatus.CONFIRMED: "Confirmed orders can only be transitioned to CANCELLED",
    OrderStatus.CANCELLED: "Cancelled orders cannot be modified",
}

# Only DRAFT orders accept single-item add/remove.
ITEM_MUTABLE_STATES: set[str] = {OrderStatus.DRAFT}

# Statuses in which the item set is frozen, whatever the path.
ITEM_FROZEN_STATES: set[str] = {OrderStatus.CONFIRMED, OrderStatus.CANCELLED}

# Largest values the item and order columns can hold.
MAX_AMOUNT = Decimal("9999999999.99")
MAX_QUANTITY = 2147483647

MONEY_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
