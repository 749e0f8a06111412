"""Sales order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
subclasses a shared error kind from ``modules.core.exceptions`` so the
API layer can translate it into an HTTP response without knowing the
concrete class.
"""

from __future__ import annotations

from modules.core.exceptions import (
    ConflictingState,
    IllegalStateTransition,
    InvalidInput,
    NotFound,
)


class OrderNotFound(NotFound):
    """The requested sales order does not exist."""


class OrderItemNotFound(NotFound):
    """The item does not belong to the order's current item set."""


class InvalidOrderData(InvalidInput):
    """A mandatory field is missing or a quantity/price is not positive."""


class InvalidOrderStatus(IllegalStateTransition):
    """The requested status change is not allowed from the current status."""


class OrderItemsLocked(IllegalStateTransition):
    """Items cannot be changed in the order's current status."""


class OrderAlreadyConfirmed(ConflictingState):
    """The order has already been confirmed."""


class OrderNotPaid(ConflictingState):
    """The order's invoice is missing or not fully paid."""


class OrderNotDeletable(ConflictingState):
    """The order is invoiced or no longer a draft."""
