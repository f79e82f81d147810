"""Transactional email client (Resend-compatible HTTP API)."""

import logging

import httpx

logger = logging.getLogger(__name__)


class EmailServiceError(Exception):
    """Raised when an email could not be handed to the provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _sanitize_header(value: str) -> str:
    # Subject and sender end up in mail headers
    return (value or "").replace("\r", " ").replace("\n", " ").strip()


class EmailClient:
    """Sends HTML emails through the provider's REST endpoint.

    The provider accepts ``{from, to, subject, html}`` with bearer auth and
    answers 2xx with the message id on success.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_token: str,
        api_url: str = "https://api.resend.com/emails",
        sender: str = "Orders <onboarding@resend.dev>",
    ) -> None:
        self._http = http
        self._api_token = api_token
        self._api_url = api_url
        self._sender = _sanitize_header(sender)

    async def send(self, to: str | list[str], subject: str, html: str) -> str | None:
        """Send one email.

        Args:
            to: Recipient address or list of addresses.
            subject: Subject line.
            html: HTML body.

        Returns:
            Provider message id, if the provider returned one.

        Raises:
            EmailServiceError: On transport failure or a non-2xx response.
        """
        recipients = [to] if isinstance(to, str) else list(to)
        if not recipients or not all(recipients):
            raise EmailServiceError("At least one recipient is required")

        payload = {
            "from": self._sender,
            "to": recipients,
            "subject": _sanitize_header(subject),
            "html": html,
        }

        try:
            response = await self._http.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_token}"},
            )
        except httpx.HTTPError as e:
            raise EmailServiceError(f"Email request failed: {e}") from e

        if not response.is_success:
            raise EmailServiceError(
                f"Email API returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        message_id = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message_id = body.get("id")
        except ValueError:
            logger.debug("Email API response carried no JSON body")

        logger.info("Email '%s' accepted for %d recipient(s)", payload["subject"], len(recipients))
        return message_id
