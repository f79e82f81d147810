"""Pytest configuration and fixtures for payhook tests.

This module provides reusable fixtures for testing:
- Settings for each dispatch mode
- A fake upstream (processor, email API, commerce API) on httpx.MockTransport
- A TestClient factory with dependencies overridden
- Signed webhook bodies
"""

import hashlib
import hmac
import json
import os
from typing import Any, Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

# === Environment Setup ===

os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from payhook.config import WebhookSettings  # noqa: E402

# === Test Configuration ===

TEST_SECRET = "sk_test_webhook_secret_123"
TEST_REFERENCE = "T685312322670591"
TEST_AMOUNT = 500000
TEST_CUSTOMER_EMAIL = "buyer@example.com"
TEST_NOTIFY_ADDRESS = "ops@example.com"

BASE_SETTINGS: dict[str, Any] = {
    "signing_secret": TEST_SECRET,
    "email_api_token": "re_test_token",
    "notify_address": TEST_NOTIFY_ADDRESS,
    "commerce_store_domain": "teststore",
    "commerce_access_token": "shpat_test_token",
}

PROCESSOR_HOST = "api.paystack.co"
EMAIL_HOST = "api.resend.com"
COMMERCE_HOST = "teststore.myshopify.com"


# === Helper Functions ===


def sign(body: bytes, secret: str = TEST_SECRET) -> str:
    """Create the signature header value for a body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


def custom_field(name: str, value: Any) -> dict[str, Any]:
    """One checkout custom field as the processor sends it."""
    return {
        "display_name": name.replace("_", " ").title(),
        "variable_name": name,
        "value": value,
    }


def charge_success_event(
    reference: str = TEST_REFERENCE,
    amount: int = TEST_AMOUNT,
    custom_fields: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Create a charge.success webhook event."""
    if custom_fields is None:
        custom_fields = [
            custom_field("product_title", "Ankara Tote Bag"),
            custom_field("variant_id", "987"),
            custom_field("customer_name", "Ada Obi"),
            custom_field("phone", "+2348012345678"),
            custom_field("shipping_zone", "Lagos Mainland"),
            custom_field("address", "12 Allen Avenue, Ikeja"),
            custom_field("shipping_fee", "2500"),
        ]
    return {
        "event": "charge.success",
        "data": {
            "id": 302961,
            "reference": reference,
            "amount": amount,
            "currency": "NGN",
            "status": "success",
            "paid_at": "2024-01-15T10:30:00.000Z",
            "customer": {
                "id": 68324,
                "email": TEST_CUSTOMER_EMAIL,
                "customer_code": "CUS_qo38as2hpsgk2r0",
                "first_name": "Ada",
                "last_name": "Obi",
            },
            "metadata": {"custom_fields": custom_fields},
        },
    }


def encode(event: dict[str, Any]) -> bytes:
    return json.dumps(event).encode("utf-8")


# === Fake Upstream ===


class FakeUpstream:
    """Records outbound requests and answers them like the real services.

    Tests tweak the canned responses through the attributes below.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.verify_status_code = 200
        self.verify_body: dict[str, Any] = {
            "status": True,
            "message": "Verification successful",
            "data": {
                "reference": TEST_REFERENCE,
                "status": "success",
                "amount": TEST_AMOUNT,
                "currency": "NGN",
            },
        }
        self.verify_error: Exception | None = None
        # Status code per email call, in order; calls beyond the list get 200
        self.email_status_codes: list[int] = []
        self.graphql_responses: dict[str, tuple[int, dict[str, Any]]] = {
            "draftOrderCreate": (
                200,
                {
                    "data": {
                        "draftOrderCreate": {
                            "draftOrder": {
                                "id": "gid://shopify/DraftOrder/111",
                                "invoiceUrl": "https://teststore.myshopify.com/invoices/abc",
                            },
                            "userErrors": [],
                        }
                    }
                },
            ),
            "draftOrderComplete": (
                200,
                {
                    "data": {
                        "draftOrderComplete": {
                            "draftOrder": {
                                "id": "gid://shopify/DraftOrder/111",
                                "order": {"id": "gid://shopify/Order/222"},
                            },
                            "userErrors": [],
                        }
                    }
                },
            ),
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host == PROCESSOR_HOST:
            if self.verify_error is not None:
                raise self.verify_error
            return httpx.Response(self.verify_status_code, json=self.verify_body)

        if host == EMAIL_HOST:
            index = len(self.calls_to(EMAIL_HOST)) - 1
            status = (
                self.email_status_codes[index]
                if index < len(self.email_status_codes)
                else 200
            )
            if status >= 300:
                return httpx.Response(status, json={"message": "rejected"})
            return httpx.Response(status, json={"id": f"email_{index + 1}"})

        if host == COMMERCE_HOST:
            query = json.loads(request.content)["query"]
            for operation, (status, body) in self.graphql_responses.items():
                if operation in query:
                    return httpx.Response(status, json=body)

        return httpx.Response(404, json={"message": f"unexpected request to {host}"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def graphql_operations(self) -> list[str]:
        operations = []
        for request in self.calls_to(COMMERCE_HOST):
            query = json.loads(request.content)["query"]
            for operation in self.graphql_responses:
                if operation in query:
                    operations.append(operation)
        return operations


# === Fixtures ===


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Drop cached settings and secret stores around each test."""
    from payhook.services.ssm_service import reset_secret_stores
    from payhook_api.dependencies import reset_dependencies

    reset_dependencies()
    reset_secret_stores()
    yield
    reset_dependencies()
    reset_secret_stores()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_settings() -> Callable[..., WebhookSettings]:
    """Build settings from the test defaults plus overrides."""

    def _make(**overrides: Any) -> WebhookSettings:
        return WebhookSettings(**{**BASE_SETTINGS, **overrides})

    return _make


@pytest.fixture
def make_client(
    upstream: FakeUpstream, make_settings: Callable[..., WebhookSettings]
) -> Generator[Callable[..., TestClient], None, None]:
    """Create a TestClient whose outbound calls go to the fake upstream."""
    from payhook_api.dependencies import get_http_client, get_settings
    from payhook_api.main import app

    def _make(**overrides: Any) -> TestClient:
        settings = make_settings(**overrides)

        async def _http_client():
            async with httpx.AsyncClient(transport=upstream.transport) as client:
                yield client

        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_http_client] = _http_client
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def post_event() -> Callable[..., httpx.Response]:
    """POST a signed event through a client."""

    def _post(
        client: TestClient,
        event: dict[str, Any] | bytes,
        signature: str | None = None,
    ) -> httpx.Response:
        body = event if isinstance(event, bytes) else encode(event)
        headers = {"Content-Type": "application/json"}
        headers["x-paystack-signature"] = sign(body) if signature is None else signature
        return client.post("/api/webhook", content=body, headers=headers)

    return _post
