"""Downstream actions for a verified payment.

The action is chosen per deployment (``WebhookSettings.dispatch_mode``):

- NotificationDispatcher: email the operator, optionally the customer too.
  Sends are independent; every channel is attempted and reported.
- OrderDispatcher: create a draft order for the purchased variant, then
  complete it. Completion only runs if creation succeeded.
"""

from typing import Any, Optional, Protocol

import httpx

from payhook.config import DispatchMode, WebhookSettings
from payhook.models.errors import ErrorCode, WebhookError
from payhook.models.events import PaymentRecord
from payhook.models.results import ChannelOutcome, DispatchOutcome
from payhook.services.commerce_client import CommerceServiceError, ShopifyClient
from payhook.services.email_service import EmailClient, EmailServiceError
from payhook.services.templates import render_customer_receipt, render_operator_summary
from payhook.utils.logging import get_logger, log_dispatch

logger = get_logger(__name__)

ORDER_NOTE = "Paid via Paystack - Ref: {reference}"
REFERENCE_ATTRIBUTE = "paystack_reference"


class DispatchFailedError(WebhookError):
    """One or more downstream channels failed.

    The error body lists every channel's outcome so a partial failure is
    never mistaken for success.
    """

    def __init__(
        self,
        reference: str,
        outcome: DispatchOutcome,
        message: Optional[str] = None,
    ):
        details: dict[str, Any] = {
            "reference": reference,
            "channels": [c.model_dump() for c in outcome.channels],
        }
        details.update(outcome.details)
        super().__init__(ErrorCode.DISPATCH_FAILED, details=details, message=message)
        self.reference = reference
        self.outcome = outcome


class Dispatcher(Protocol):
    """Performs the downstream action for one payment."""

    success_message: str

    async def dispatch(self, payment: PaymentRecord) -> DispatchOutcome:
        ...


class NotificationDispatcher:
    """Emails a payment summary to the operator and optionally the customer."""

    success_message = "Notification sent"

    def __init__(
        self,
        email: EmailClient,
        notify_address: str,
        send_receipt: bool = False,
    ) -> None:
        self._email = email
        self._notify_address = notify_address
        self._send_receipt = send_receipt

    async def _send(self, channel: str, to: str, subject: str, html: str) -> ChannelOutcome:
        try:
            message_id = await self._email.send(to, subject, html)
        except EmailServiceError as e:
            logger.error("Failed to send %s: %s", channel, e)
            return ChannelOutcome(channel=channel, status="failed", detail=str(e))
        return ChannelOutcome(channel=channel, status="sent", detail=message_id)

    async def dispatch(self, payment: PaymentRecord) -> DispatchOutcome:
        outcome = DispatchOutcome()

        subject, html = render_operator_summary(payment)
        outcome.channels.append(
            await self._send("operator_email", self._notify_address, subject, html)
        )

        if self._send_receipt:
            subject, html = render_customer_receipt(payment)
            outcome.channels.append(
                await self._send("customer_email", payment.customer.email, subject, html)
            )

        log_dispatch(logger, payment.reference, outcome.channels)

        if outcome.failed:
            failed = ", ".join(c.channel for c in outcome.channels if c.failed)
            raise DispatchFailedError(
                payment.reference, outcome, message=f"Email delivery failed: {failed}"
            )
        return outcome


class OrderDispatcher:
    """Creates and completes a commerce order for the purchased variant."""

    success_message = "Order created successfully"

    def __init__(self, commerce: ShopifyClient) -> None:
        self._commerce = commerce

    async def dispatch(self, payment: PaymentRecord) -> DispatchOutcome:
        variant_id = payment.metadata.field("variant_id")
        if not variant_id:
            logger.error("No variant_id in metadata for %s", payment.reference)
            raise WebhookError(
                ErrorCode.MISSING_VARIANT_ID, details={"reference": payment.reference}
            )

        outcome = DispatchOutcome()
        try:
            draft = await self._commerce.create_draft_order(
                email=payment.customer.email,
                variant_id=variant_id,
                note=ORDER_NOTE.format(reference=payment.reference),
                custom_attributes={REFERENCE_ATTRIBUTE: payment.reference},
            )
            outcome.details["draft_order_id"] = draft.id
            outcome.details["invoice_url"] = draft.invoice_url

            completed = await self._commerce.complete_draft_order(draft.id)
            outcome.details["order_id"] = completed.order_id
        except CommerceServiceError as e:
            outcome.channels.append(
                ChannelOutcome(channel="order", status="failed", detail=str(e))
            )
            log_dispatch(logger, payment.reference, outcome.channels)
            raise DispatchFailedError(
                payment.reference, outcome, message=f"Order creation failed: {e}"
            ) from e

        outcome.channels.append(
            ChannelOutcome(channel="order", status="sent", detail=completed.order_id)
        )
        log_dispatch(logger, payment.reference, outcome.channels)
        return outcome


def build_dispatcher(settings: WebhookSettings, http: httpx.AsyncClient) -> Dispatcher:
    """Select the downstream strategy configured for this deployment."""
    if settings.dispatch_mode is DispatchMode.ORDER:
        return OrderDispatcher(
            ShopifyClient(
                http,
                store_domain=settings.commerce_store_domain or "",
                access_token=settings.commerce_access_token or "",
                api_version=settings.commerce_api_version,
            )
        )

    email = EmailClient(
        http,
        api_token=settings.email_api_token or "",
        api_url=settings.email_api_url,
        sender=settings.email_sender,
    )
    return NotificationDispatcher(
        email,
        notify_address=settings.notify_address or "",
        send_receipt=settings.dispatch_mode is DispatchMode.NOTIFY_WITH_RECEIPT,
    )
