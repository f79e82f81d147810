"""Unit tests for the outbound API clients.

Each client talks to a fake upstream on httpx.MockTransport; no network.

Test categories:
- PaystackClient: transaction verification
- EmailClient: transactional email sends
- ShopifyClient: draft order create/complete
"""

import asyncio
import json

import httpx
import pytest

from conftest import COMMERCE_HOST, EMAIL_HOST, FakeUpstream
from payhook.services.commerce_client import (
    CommerceServiceError,
    ShopifyClient,
    normalize_store_domain,
    variant_gid,
)
from payhook.services.email_service import EmailClient, EmailServiceError
from payhook.services.paystack_client import PaystackClient, ProcessorServiceError


def _run(coro_factory, upstream: FakeUpstream):
    """Run an async client call against the fake upstream."""

    async def _inner():
        async with httpx.AsyncClient(transport=upstream.transport) as http:
            return await coro_factory(http)

    return asyncio.run(_inner())


# === PaystackClient ===


class TestPaystackClient:

    def _verify(self, upstream: FakeUpstream, reference: str = "T685312322670591"):
        return _run(
            lambda http: PaystackClient(http, "sk_test").verify_transaction(reference),
            upstream,
        )

    def test_successful_verification(self, upstream: FakeUpstream):
        verification = self._verify(upstream)

        assert verification.succeeded
        assert verification.amount == 500000
        assert verification.currency == "NGN"

        request = upstream.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/transaction/verify/T685312322670591"
        assert request.headers["Authorization"] == "Bearer sk_test"

    def test_reference_is_url_quoted(self, upstream: FakeUpstream):
        self._verify(upstream, reference="T1/../admin")
        assert upstream.requests[0].url.raw_path.endswith(b"/transaction/verify/T1%2F..%2Fadmin")

    def test_non_success_status_is_reported(self, upstream: FakeUpstream):
        upstream.verify_body["data"]["status"] = "abandoned"
        assert not self._verify(upstream).succeeded

    def test_http_error_status_raises_with_code(self, upstream: FakeUpstream):
        upstream.verify_status_code = 404
        upstream.verify_body = {"status": False, "message": "Transaction reference not found"}

        with pytest.raises(ProcessorServiceError) as exc_info:
            self._verify(upstream)

        assert exc_info.value.status_code == 404
        assert exc_info.value.is_client_error

    def test_status_false_raises(self, upstream: FakeUpstream):
        upstream.verify_body = {"status": False, "message": "Invalid key"}

        with pytest.raises(ProcessorServiceError, match="Invalid key"):
            self._verify(upstream)

    def test_malformed_data_raises(self, upstream: FakeUpstream):
        upstream.verify_body = {"status": True, "data": {"status": "success"}}

        with pytest.raises(ProcessorServiceError, match="Unexpected verification payload"):
            self._verify(upstream)

    def test_transport_error_raises_without_status(self, upstream: FakeUpstream):
        upstream.verify_error = httpx.ConnectError("connection refused")

        with pytest.raises(ProcessorServiceError) as exc_info:
            self._verify(upstream)

        assert exc_info.value.status_code is None
        assert not exc_info.value.is_client_error


# === EmailClient ===


class TestEmailClient:

    def _send(self, upstream: FakeUpstream, to="ops@example.com", subject="Hello"):
        return _run(
            lambda http: EmailClient(http, "re_test", sender="Shop <shop@example.com>").send(
                to, subject, "<p>hi</p>"
            ),
            upstream,
        )

    def test_posts_payload_with_bearer_auth(self, upstream: FakeUpstream):
        message_id = self._send(upstream)

        assert message_id == "email_1"
        request = upstream.calls_to(EMAIL_HOST)[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer re_test"
        assert json.loads(request.content) == {
            "from": "Shop <shop@example.com>",
            "to": ["ops@example.com"],
            "subject": "Hello",
            "html": "<p>hi</p>",
        }

    def test_non_2xx_raises(self, upstream: FakeUpstream):
        upstream.email_status_codes = [422]

        with pytest.raises(EmailServiceError) as exc_info:
            self._send(upstream)

        assert exc_info.value.status_code == 422

    def test_subject_newlines_are_stripped(self, upstream: FakeUpstream):
        self._send(upstream, subject="New\r\nBcc: evil@example.com")
        body = json.loads(upstream.calls_to(EMAIL_HOST)[0].content)
        assert "\n" not in body["subject"] and "\r" not in body["subject"]

    @pytest.mark.parametrize("to", ["", [], [""]])
    def test_missing_recipient_raises_without_request(self, upstream: FakeUpstream, to):
        with pytest.raises(EmailServiceError):
            self._send(upstream, to=to)
        assert upstream.requests == []


# === ShopifyClient ===


class TestShopifyHelpers:

    @pytest.mark.parametrize(
        "store,expected",
        [
            ("teststore", "teststore.myshopify.com"),
            ("teststore.myshopify.com", "teststore.myshopify.com"),
            ("https://teststore.myshopify.com/", "teststore.myshopify.com"),
        ],
    )
    def test_normalize_store_domain(self, store, expected):
        assert normalize_store_domain(store) == expected

    def test_variant_gid(self):
        assert variant_gid("987") == "gid://shopify/ProductVariant/987"
        assert variant_gid("gid://shopify/ProductVariant/5") == "gid://shopify/ProductVariant/5"


class TestShopifyClient:

    def _client(self, http: httpx.AsyncClient) -> ShopifyClient:
        return ShopifyClient(http, "teststore", "shpat_test")

    def _create(self, upstream: FakeUpstream):
        return _run(
            lambda http: self._client(http).create_draft_order(
                email="buyer@example.com",
                variant_id="987",
                note="Paid via Paystack - Ref: T1",
                custom_attributes={"paystack_reference": "T1"},
            ),
            upstream,
        )

    def test_endpoint(self):
        client = ShopifyClient(httpx.AsyncClient(), "teststore", "tok", api_version="2024-01")
        assert client.endpoint == "https://teststore.myshopify.com/admin/api/2024-01/graphql.json"

    def test_create_draft_order_uses_variables(self, upstream: FakeUpstream):
        draft = self._create(upstream)

        assert draft.id == "gid://shopify/DraftOrder/111"
        assert draft.invoice_url == "https://teststore.myshopify.com/invoices/abc"

        request = upstream.calls_to(COMMERCE_HOST)[0]
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        body = json.loads(request.content)
        assert "buyer@example.com" not in body["query"]
        assert body["variables"]["input"] == {
            "email": "buyer@example.com",
            "note": "Paid via Paystack - Ref: T1",
            "lineItems": [{"variantId": "gid://shopify/ProductVariant/987", "quantity": 1}],
            "customAttributes": [{"key": "paystack_reference", "value": "T1"}],
        }

    def test_complete_draft_order(self, upstream: FakeUpstream):
        completed = _run(
            lambda http: self._client(http).complete_draft_order("gid://shopify/DraftOrder/111"),
            upstream,
        )

        assert completed.order_id == "gid://shopify/Order/222"
        body = json.loads(upstream.calls_to(COMMERCE_HOST)[0].content)
        assert body["variables"] == {"id": "gid://shopify/DraftOrder/111"}

    def test_top_level_errors_raise(self, upstream: FakeUpstream):
        upstream.graphql_responses["draftOrderCreate"] = (
            200,
            {"errors": [{"message": "Access denied"}]},
        )
        with pytest.raises(CommerceServiceError, match="Shopify API error"):
            self._create(upstream)

    def test_user_errors_raise(self, upstream: FakeUpstream):
        upstream.graphql_responses["draftOrderCreate"] = (
            200,
            {
                "data": {
                    "draftOrderCreate": {
                        "draftOrder": None,
                        "userErrors": [{"field": ["lineItems"], "message": "Variant not found"}],
                    }
                }
            },
        )
        with pytest.raises(CommerceServiceError, match="Variant not found"):
            self._create(upstream)

    def test_http_error_raises(self, upstream: FakeUpstream):
        upstream.graphql_responses["draftOrderCreate"] = (401, {"errors": "Unauthorized"})
        with pytest.raises(CommerceServiceError) as exc_info:
            self._create(upstream)
        assert exc_info.value.status_code == 401

    def test_missing_draft_id_raises(self, upstream: FakeUpstream):
        upstream.graphql_responses["draftOrderCreate"] = (
            200,
            {"data": {"draftOrderCreate": {"draftOrder": {}, "userErrors": []}}},
        )
        with pytest.raises(CommerceServiceError, match="no draft order id"):
            self._create(upstream)
