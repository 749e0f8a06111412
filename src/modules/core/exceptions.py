"""Domain error taxonomy shared by every bounded context.

Services raise subclasses of these four kinds.  The transport layer
(``modules.core.exception_handler``) maps each kind to an HTTP status;
the core never deals with status codes.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for business-rule violations.

    Carries a human-readable ``message``; no error codes are distinguished
    beyond the concrete subclass.
    """

    default_message = "Business rule violated."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    """A referenced order, invoice, item, customer, shop or product is missing."""

    default_message = "Resource not found."


class InvalidInput(DomainError):
    """Mandatory data is missing or a numeric value is out of range."""

    default_message = "Invalid input."


class IllegalStateTransition(DomainError):
    """The requested change is not permitted from the current status."""

    default_message = "Illegal state transition."


class ConflictingState(DomainError):
    """The operation conflicts with the current state of related records."""

    default_message = "Conflicting state."
