"""Bearer JWT authentication for Django REST Framework.

Tokens are issued by the platform's identity service and signed with a
shared HMAC key (``JWT_SECRET_KEY``, base64-encoded).  The ``sub`` claim
names the principal and ``authorities`` lists the operations it may run.

Security decisions
------------------
* **Fail Closed**: any decode / validation error returns 401.
* ``algorithms`` is pinned to the configured value (default HS256),
  never derived from the incoming token header.
* The raw token is kept on the user so it can be forwarded to peer
  services on outbound lookups.
"""

from __future__ import annotations

import base64
import binascii

import jwt as pyjwt
import structlog
from django.conf import settings
from jwt.exceptions import PyJWTError

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = structlog.get_logger(__name__)


def signing_key(secret: str | None = None) -> bytes:
    """Decode the base64 HMAC secret shared with the identity service."""
    raw = settings.JWT_SECRET_KEY if secret is None else secret
    if not raw:
        raise AuthenticationFailed("JWT signing key is not configured.")
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AuthenticationFailed("JWT signing key is not valid base64.") from exc


class TokenUser:
    """Lightweight user object for requests authenticated by a bearer token.

    The identity service is the source of truth; there is no local
    ``User`` row.  Authorization reads ``authorities``.
    """

    is_authenticated = True
    is_active = True
    is_superuser = False

    def __init__(self, payload: dict, token: str = "") -> None:
        self.payload = payload
        self.token = token
        self.sub: str = payload.get("sub", "")
        self.authorities: list[str] = list(payload.get("authorities") or [])

    def __str__(self) -> str:  # pragma: no cover
        return self.sub


class ServiceJWTAuthentication(BaseAuthentication):
    """DRF authentication class that validates HMAC-signed Bearer tokens."""

    keyword = "Bearer"

    def authenticate(self, request):
        """Return ``(TokenUser, token)`` or ``None`` (no credentials)."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header:
            return None

        token = self._extract_token(header)
        payload = self._decode_token(token)
        if not payload.get("sub"):
            raise AuthenticationFailed("Token has no subject.")

        user = TokenUser(payload, token)
        logger.info("jwt_authenticated", sub=user.sub)
        return (user, token)

    def authenticate_header(self, request):
        """Value for the ``WWW-Authenticate`` response header on 401."""
        return f'{self.keyword} realm="api"'

    @classmethod
    def _extract_token(cls, header: str) -> str:
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != cls.keyword.lower():
            raise AuthenticationFailed("Invalid Authorization header format.")
        return parts[1]

    @staticmethod
    def _decode_token(token: str) -> dict:
        try:
            return pyjwt.decode(token, signing_key(), algorithms=[settings.JWT_ALGORITHM])
        except PyJWTError as exc:
            logger.warning("jwt_validation_failed", error=str(exc))
            raise AuthenticationFailed(f"Token validation failed: {exc}") from exc
