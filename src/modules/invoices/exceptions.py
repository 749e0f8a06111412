"""Invoice domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import ConflictingState, NotFound


class InvoiceNotFound(NotFound):
    """The requested invoice does not exist."""


class InvoiceAlreadyExists(ConflictingState):
    """The sales order already carries an invoice."""


class OrderNotInvoiceable(ConflictingState):
    """The sales order is cancelled and cannot be invoiced."""
