"""Paystack API client for transaction re-verification.

A signed webhook proves the sender knows the secret; it does not prove the
charge happened for the amount claimed. The verify endpoint is the source
of truth for both.
"""

import logging
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)


class ProcessorServiceError(Exception):
    """Raised when the processor API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize with message and optional upstream HTTP status.

        Args:
            message: Human-readable error message.
            status_code: HTTP status returned by the processor, if any.
        """
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


class TransactionVerification(BaseModel):
    """Canonical transaction state reported by the processor."""

    reference: str
    status: str
    amount: int
    currency: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class PaystackClient:
    """Client for the processor's transaction API.

    Usage:
        async with httpx.AsyncClient() as http:
            client = PaystackClient(http, api_token="sk_live_...")
            verification = await client.verify_transaction("T123456")
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_token: str,
        base_url: str = "https://api.paystack.co",
    ) -> None:
        self._http = http
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")

    async def verify_transaction(self, reference: str) -> TransactionVerification:
        """Fetch the authoritative state of a transaction.

        Args:
            reference: Processor-assigned transaction reference.

        Returns:
            TransactionVerification with status and amount in minor units.

        Raises:
            ProcessorServiceError: On transport failure, non-2xx response,
                ``status: false`` or an unexpected body.
        """
        url = f"{self._base_url}/transaction/verify/{quote(reference, safe='')}"
        logger.info("Verifying transaction %s with processor", reference)

        try:
            response = await self._http.get(
                url, headers={"Authorization": f"Bearer {self._api_token}"}
            )
        except httpx.HTTPError as e:
            raise ProcessorServiceError(
                f"Transaction verification request failed: {e}"
            ) from e

        if not response.is_success:
            raise ProcessorServiceError(
                f"Transaction verification returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProcessorServiceError(
                "Transaction verification returned invalid JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(body, dict) or not body.get("status"):
            message = body.get("message") if isinstance(body, dict) else None
            raise ProcessorServiceError(
                f"Processor rejected verification: {message or 'status false'}",
                status_code=response.status_code,
            )

        data = body.get("data") or {}
        try:
            verification = TransactionVerification(
                reference=data.get("reference") or reference,
                status=data.get("status"),
                amount=data.get("amount"),
                currency=data.get("currency"),
            )
        except (ValidationError, AttributeError) as e:
            raise ProcessorServiceError(
                f"Unexpected verification payload: {e}",
                status_code=response.status_code,
            ) from e

        logger.info(
            "Processor reports %s: status=%s amount=%d",
            reference,
            verification.status,
            verification.amount,
        )
        return verification
