"""Explicit authorization decisions passed into service operations.

The transport resolves *who may do what* from the caller's token claims
and hands the verdict to the service as an ``AccessDecision``.  Services
only check ``granted``; they carry no identity model of their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import structlog

logger = structlog.get_logger(__name__)

SYSTEM_SUBJECT = "system"


class Authority:
    """Authority names carried in the ``authorities`` JWT claim."""

    CREATE_SALES_ORDER = "CREATE_SALES_ORDER"
    READ_SALES_ORDER = "READ_SALES_ORDER"
    UPDATE_SALES_ORDER = "UPDATE_SALES_ORDER"
    DELETE_SALES_ORDER = "DELETE_SALES_ORDER"
    CONFIRM_SALES_ORDER = "CONFIRM_SALES_ORDER"
    CREATE_INVOICE = "CREATE_INVOICE"
    READ_INVOICE = "READ_INVOICE"
    UPDATE_INVOICE = "UPDATE_INVOICE"
    DELETE_INVOICE = "DELETE_INVOICE"


class OperationNotPermitted(Exception):
    """The caller is not allowed to run the requested operation."""


@dataclass(frozen=True)
class AccessDecision:
    """Already-resolved verdict for a single operation."""

    granted: bool
    subject: str = SYSTEM_SUBJECT
    authority: str | None = None

    @classmethod
    def system(cls) -> AccessDecision:
        """Decision used for calls originating inside the service itself."""
        return cls(granted=True)

    @classmethod
    def for_authorities(
        cls, subject: str, authorities: Iterable[str], authority: str
    ) -> AccessDecision:
        return cls(
            granted=authority in set(authorities),
            subject=subject,
            authority=authority,
        )

    def ensure_granted(self) -> None:
        if self.granted:
            return
        logger.warning(
            "access.denied",
            subject=self.subject,
            authority=self.authority,
        )
        raise OperationNotPermitted(
            f"Subject {self.subject} lacks authority {self.authority}."
        )


def decide(request: Any, authority: str) -> AccessDecision:
    """Resolve an ``AccessDecision`` for ``authority`` from a DRF request.

    Token users expose ``authorities``; Django superusers are granted
    everything so the admin site and shell sessions keep working.
    """
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return AccessDecision(granted=False, subject="anonymous", authority=authority)

    subject = str(getattr(user, "sub", "") or getattr(user, "username", ""))
    if getattr(user, "is_superuser", False):
        return AccessDecision(granted=True, subject=subject, authority=authority)

    return AccessDecision.for_authorities(
        subject, getattr(user, "authorities", ()), authority
    )
