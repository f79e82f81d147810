"""Shopify Admin GraphQL client for draft-order fulfilment.

An order is created in two steps: a draft order carrying the purchased
variant and the payment reference, then completion of that draft, which
marks it paid and turns it into a real order.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DRAFT_ORDER_CREATE = """
mutation draftOrderCreate($input: DraftOrderInput!) {
  draftOrderCreate(input: $input) {
    draftOrder {
      id
      invoiceUrl
    }
    userErrors {
      field
      message
    }
  }
}
"""

DRAFT_ORDER_COMPLETE = """
mutation draftOrderComplete($id: ID!) {
  draftOrderComplete(id: $id) {
    draftOrder {
      id
      order {
        id
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"


class CommerceServiceError(Exception):
    """Raised when a commerce API call fails or reports errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DraftOrder(BaseModel):
    id: str
    invoice_url: str | None = None


class CompletedOrder(BaseModel):
    draft_order_id: str
    order_id: str | None = None


def normalize_store_domain(store: str) -> str:
    """Turn ``mystore``, ``mystore.myshopify.com`` or a URL into a bare host."""
    host = store.strip()
    for scheme in ("https://", "http://"):
        if host.startswith(scheme):
            host = host[len(scheme):]
    host = host.split("/", 1)[0]
    if "." not in host:
        host = f"{host}.myshopify.com"
    return host


def variant_gid(variant_id: str) -> str:
    """Return the global id for a numeric variant id (gids pass through)."""
    if variant_id.startswith("gid://"):
        return variant_id
    return f"{VARIANT_GID_PREFIX}{variant_id}"


class ShopifyClient:
    """Client for the Shopify Admin GraphQL API.

    Usage:
        async with httpx.AsyncClient() as http:
            shop = ShopifyClient(http, "mystore", access_token="shpat_...")
            draft = await shop.create_draft_order(
                email="buyer@example.com",
                variant_id="987",
                note="Paid via Paystack - Ref: T123",
                custom_attributes={"paystack_reference": "T123"},
            )
            await shop.complete_draft_order(draft.id)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        store_domain: str,
        access_token: str,
        api_version: str = "2024-01",
    ) -> None:
        self._http = http
        self._access_token = access_token
        self._endpoint = (
            f"https://{normalize_store_domain(store_domain)}"
            f"/admin/api/{api_version}/graphql.json"
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def _execute(self, operation: str, query: str, variables: dict[str, Any]) -> dict:
        try:
            response = await self._http.post(
                self._endpoint,
                json={"query": query, "variables": variables},
                headers={"X-Shopify-Access-Token": self._access_token},
            )
        except httpx.HTTPError as e:
            raise CommerceServiceError(f"{operation} request failed: {e}") from e

        if not response.is_success:
            raise CommerceServiceError(
                f"{operation} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise CommerceServiceError(f"{operation} returned invalid JSON") from e

        if not isinstance(body, dict):
            raise CommerceServiceError(f"{operation} returned an unexpected body")
        if body.get("errors"):
            raise CommerceServiceError(f"Shopify API error: {body['errors']}")

        result = (body.get("data") or {}).get(operation) or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            messages = "; ".join(str(e.get("message")) for e in user_errors)
            raise CommerceServiceError(f"{operation} rejected: {messages}")

        return result

    async def create_draft_order(
        self,
        *,
        email: str,
        variant_id: str,
        note: str,
        quantity: int = 1,
        custom_attributes: dict[str, str] | None = None,
    ) -> DraftOrder:
        """Create a draft order with a single line item.

        Raises:
            CommerceServiceError: If the draft could not be created.
        """
        order_input: dict[str, Any] = {
            "email": email,
            "note": note,
            "lineItems": [{"variantId": variant_gid(variant_id), "quantity": quantity}],
            "customAttributes": [
                {"key": key, "value": value}
                for key, value in (custom_attributes or {}).items()
            ],
        }

        result = await self._execute(
            "draftOrderCreate", DRAFT_ORDER_CREATE, {"input": order_input}
        )
        draft = result.get("draftOrder") or {}
        if not draft.get("id"):
            raise CommerceServiceError("draftOrderCreate returned no draft order id")

        logger.info("Draft order %s created for variant %s", draft["id"], variant_id)
        return DraftOrder(id=draft["id"], invoice_url=draft.get("invoiceUrl"))

    async def complete_draft_order(self, draft_order_id: str) -> CompletedOrder:
        """Complete a draft order, marking it as paid.

        Raises:
            CommerceServiceError: If completion failed.
        """
        result = await self._execute(
            "draftOrderComplete", DRAFT_ORDER_COMPLETE, {"id": draft_order_id}
        )
        draft = result.get("draftOrder") or {}
        order = draft.get("order") or {}

        logger.info("Draft order %s completed as order %s", draft_order_id, order.get("id"))
        return CompletedOrder(draft_order_id=draft_order_id, order_id=order.get("id"))
