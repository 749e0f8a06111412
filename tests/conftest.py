from __future__ import annotations

from decimal import Decimal
from typing import Iterable
from uuid import UUID, uuid4

import httpx
import jwt as pyjwt
import pytest

from rest_framework.test import APIClient

from modules.core.authentication import TokenUser, signing_key
from modules.core.authorization import Authority
from modules.directory.clients import PeerDirectories
from modules.invoices.repositories.django_repository import InvoiceDjangoRepository
from modules.invoices.services import InvoiceService
from modules.orders.dtos import CreateOrderDTO, OrderItemSpecDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

ALL_AUTHORITIES = [
    value for name, value in vars(Authority).items() if name.isupper()
]


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Peer directories (served by httpx.MockTransport)
# ---------------------------------------------------------------------------


class FakePeerServices:
    """In-memory stand-in for the customer, product and shop services.

    Every id resolves unless it was registered as missing (404) or
    failing (500).  Requests are recorded for assertions.
    """

    def __init__(self) -> None:
        self.missing: set[str] = set()
        self.failing: set[str] = set()
        self.requests: list[httpx.Request] = []

    def forget(self, reference_id: UUID | str) -> None:
        self.missing.add(str(reference_id))

    def break_down(self, reference_id: UUID | str) -> None:
        self.failing.add(str(reference_id))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reference_id = request.url.path.rstrip("/").rsplit("/", 1)[-1]
        if reference_id in self.missing:
            return httpx.Response(404, json={"message": "not found"})
        if reference_id in self.failing:
            return httpx.Response(500, text="upstream exploded")
        return httpx.Response(200, json={"id": reference_id})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def peers() -> FakePeerServices:
    return FakePeerServices()


@pytest.fixture()
def directories(peers) -> PeerDirectories:
    return PeerDirectories.from_settings(transport=peers.transport)


@pytest.fixture()
def peer_transport(monkeypatch, peers):
    """Route the directories built by the API views to ``peers``."""
    original = PeerDirectories.from_settings.__func__

    def from_settings(cls, token=None, transport=None):
        return original(cls, token=token, transport=peers.transport)

    monkeypatch.setattr(PeerDirectories, "from_settings", classmethod(from_settings))
    return peers


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class RecordingNotifier:
    """Notification sink that remembers what it was asked to publish."""

    def __init__(self) -> None:
        self.published: list[tuple[UUID, str]] = []

    def publish(self, order_id: UUID, status: str) -> None:
        self.published.append((order_id, str(status)))


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def order_service(directories, notifier) -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        invoice_repository=InvoiceDjangoRepository(),
        directories=directories,
        notifier=notifier,
    )


@pytest.fixture()
def invoice_service(order_service) -> InvoiceService:
    return InvoiceService(
        invoice_repository=InvoiceDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        order_service=order_service,
    )


def _item_spec(
    quantity: int = 2,
    unit_price: str = "10.00",
    product_id: UUID | None = None,
) -> OrderItemSpecDTO:
    return OrderItemSpecDTO(
        product_id=product_id or uuid4(),
        quantity=quantity,
        unit_price=Decimal(unit_price),
    )


@pytest.fixture()
def item_spec():
    """Factory for complete ``OrderItemSpecDTO``s (2 x 10.00 by default)."""
    return _item_spec


@pytest.fixture()
def make_order(order_service):
    """Create a DRAFT order through the service."""

    def _make(items: Iterable[OrderItemSpecDTO] | None = None):
        return order_service.create_order(
            CreateOrderDTO(
                customer_id=uuid4(),
                shop_id=uuid4(),
                items=list(items) if items is not None else [_item_spec()],
            )
        )

    return _make


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def _make_token(sub: str = "clerk@example.com", authorities: Iterable[str] = ()) -> str:
    return pyjwt.encode(
        {"sub": sub, "authorities": list(authorities)},
        signing_key(),
        algorithm="HS256",
    )


@pytest.fixture()
def make_token():
    """Factory for bearer tokens signed with the configured key."""
    return _make_token


@pytest.fixture()
def auth_client(peer_transport):
    """APIClient force-authenticated as a token user with every authority."""
    client = APIClient()
    user = TokenUser({"sub": "clerk@example.com", "authorities": ALL_AUTHORITIES})
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def client_with_authorities(peer_transport):
    def _make(*authorities: str) -> APIClient:
        client = APIClient()
        user = TokenUser({"sub": "limited@example.com", "authorities": list(authorities)})
        client.force_authenticate(user=user)
        return client

    return _make
