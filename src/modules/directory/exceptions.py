"""Peer directory lookup failures.

Both subclass the shared domain error kinds so that a failed lookup
aborts the calling operation like any other business-rule violation.
"""

from __future__ import annotations

from modules.core.exceptions import InvalidInput, NotFound


class ReferenceNotFound(NotFound):
    """The peer service answered 404 for the referenced customer/shop/product."""


class ReferenceLookupFailed(InvalidInput):
    """The peer service answered with an error or could not be reached."""
