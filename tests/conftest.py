"""Shared fakes for the gateway and document store."""

import hashlib
import hmac
from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from payrelay.common.config import Settings
from payrelay.common.errors import ConcurrentUpdateError, GatewayError, OrderNotFoundError, SignatureMismatchError
from payrelay.common.store import StoredOrder
from payrelay.services.orders.main import create_app
from payrelay.services.orders.service import OrderService

KEY_SECRET = "test_key_secret"
FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def hmac_signature(order_id: str, payment_id: str, secret: str = KEY_SECRET) -> str:
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class FakeGateway:
    """Records create calls and checks signatures the way Razorpay does."""

    def __init__(self, secret: str = KEY_SECRET) -> None:
        self.secret = secret
        self.created: list[dict] = []
        self.fail_with: Exception | None = None
        self._ids = count(1)

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> dict:
        if self.fail_with is not None:
            raise GatewayError("Order creation failed") from self.fail_with
        self.created.append({"amount": amount_minor, "currency": currency, "receipt": receipt})
        return {
            "id": f"order_test{next(self._ids)}",
            "entity": "order",
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        if not hmac.compare_digest(hmac_signature(order_id, payment_id, self.secret), signature):
            raise SignatureMismatchError()


class InMemoryOrderStore:
    """Dict-backed store with integer versions for guarded updates."""

    def __init__(self) -> None:
        self.documents: dict[str, dict] = {}
        self.versions: dict[str, int] = {}
        self.fail_with: Exception | None = None
        self.updates: list[tuple[str, dict]] = []

    def create(self, order_id: str, document: dict) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.documents[order_id] = dict(document)
        self.versions[order_id] = 1

    def get(self, order_id: str) -> StoredOrder | None:
        if self.fail_with is not None:
            raise self.fail_with
        if order_id not in self.documents:
            return None
        return StoredOrder(data=dict(self.documents[order_id]), version=self.versions[order_id])

    def update(self, order_id: str, fields: dict, expected_version) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        if order_id not in self.documents:
            raise OrderNotFoundError(order_id)
        if self.versions[order_id] != expected_version:
            raise ConcurrentUpdateError(order_id)
        self.documents[order_id].update(fields)
        self.versions[order_id] += 1
        self.updates.append((order_id, fields))


@pytest.fixture
def cfg() -> Settings:
    return Settings(
        _env_file=None,
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret=KEY_SECRET,
        verify_signatures=True,
        default_currency="INR",
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def service(gateway, store, cfg) -> OrderService:
    return OrderService(gateway, store, cfg, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(service, cfg):
    with TestClient(create_app(service=service, cfg=cfg)) as test_client:
        yield test_client


@pytest.fixture
def sign():
    """Razorpay-style checkout signature helper."""

    return hmac_signature


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
