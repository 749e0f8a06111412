"""HTTP clients for the peer directories (customers, products, shops).

Each directory is a read-only, synchronous existence check against the
owning microservice::

    GET {base_url}/api/v1/{resource}/{id}

Response handling:

* 2xx            -> the reference exists
* 404            -> ``ReferenceNotFound``
* other 4xx      -> ``ReferenceLookupFailed("Client error: ...")``
* 5xx            -> ``ReferenceLookupFailed("Server error: ...")``
* transport error -> ``ReferenceLookupFailed("... service unavailable: ...")``

The caller's bearer token, when known, is forwarded so the peer can
apply its own authorization.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from django.conf import settings

from modules.directory.exceptions import ReferenceLookupFailed, ReferenceNotFound

logger = structlog.get_logger(__name__)

ERROR_BODY_LIMIT = 500


class PeerDirectoryClient:
    """Existence lookups against one peer service."""

    kind = "Resource"
    resource = ""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = settings.PEER_DIRECTORY_TIMEOUT if timeout is None else timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _url(self, reference_id: UUID | str) -> str:
        return f"{self.base_url}/api/v1/{self.resource}/{reference_id}"

    def _get(self, reference_id: UUID | str) -> httpx.Response:
        log = logger.bind(kind=self.kind, reference_id=str(reference_id))
        try:
            with httpx.Client(
                timeout=self._timeout,
                transport=self._transport,
                headers=self._headers(),
            ) as client:
                response = client.get(self._url(reference_id))
        except httpx.HTTPError as exc:
            log.warning("directory.lookup_unavailable", error=str(exc))
            raise ReferenceLookupFailed(
                f"{self.kind} service unavailable: {exc}"
            ) from exc

        log.info("directory.lookup_completed", status_code=response.status_code)
        return response

    def _raise_for_status(
        self, reference_id: UUID | str, response: httpx.Response
    ) -> None:
        body = response.text[:ERROR_BODY_LIMIT] or "Unknown error"
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ReferenceNotFound(f"{self.kind} with ID {reference_id} not found")
        if 400 <= response.status_code < 500:
            raise ReferenceLookupFailed(f"Client error: {body}")
        if response.status_code >= 500:
            raise ReferenceLookupFailed(f"Server error: {body}")
        raise ReferenceLookupFailed(
            f"Unexpected response {response.status_code} from {self.kind} service"
        )

    def lookup(self, reference_id: UUID | str) -> Any:
        """Return the peer's JSON representation of the reference.

        Raises:
            ReferenceNotFound: the peer answered 404.
            ReferenceLookupFailed: any other non-success outcome.
        """
        response = self._get(reference_id)
        if not response.is_success:
            self._raise_for_status(reference_id, response)
        try:
            return response.json()
        except ValueError:
            return None

    def ensure_exists(self, reference_id: UUID | str) -> None:
        """Raise unless the reference resolves."""
        self.lookup(reference_id)


class CustomerDirectory(PeerDirectoryClient):
    kind = "Customer"
    resource = "customers"


class ProductDirectory(PeerDirectoryClient):
    kind = "Product"
    resource = "products"


class ShopDirectory(PeerDirectoryClient):
    kind = "Shop"
    resource = "shops"


@dataclass(frozen=True)
class PeerDirectories:
    """The three directories the order engine consults."""

    customers: CustomerDirectory
    products: ProductDirectory
    shops: ShopDirectory

    @classmethod
    def from_settings(
        cls,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> PeerDirectories:
        return cls(
            customers=CustomerDirectory(
                settings.CUSTOMER_SERVICE_URL, token=token, transport=transport
            ),
            products=ProductDirectory(
                settings.PRODUCT_SERVICE_URL, token=token, transport=transport
            ),
            shops=ShopDirectory(
                settings.SHOP_SERVICE_URL, token=token, transport=transport
            ),
        )
