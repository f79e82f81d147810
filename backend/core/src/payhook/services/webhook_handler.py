"""Webhook handler for processing processor events.

Provides the business logic for one webhook delivery separate from HTTP
routing concerns:

1. authenticate the raw body against the signature header;
2. acknowledge anything that is not charge.success;
3. optionally re-verify the transaction with the processor;
4. hand the payment to the configured dispatcher.

Nothing is persisted between requests. Redelivery after a failure is left
to the processor's retry behaviour.
"""

import json
from typing import Optional

from pydantic import ValidationError

from payhook.config import WebhookSettings
from payhook.models.errors import ErrorCode, WebhookError
from payhook.models.events import IncomingEvent, PaymentRecord
from payhook.models.results import WebhookAck, WebhookResult
from payhook.services.dispatch import Dispatcher
from payhook.services.paystack_client import PaystackClient, ProcessorServiceError
from payhook.services.signature import verify_signature
from payhook.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)


class WebhookHandler:
    """Runs the authenticate -> re-verify -> dispatch pipeline.

    Usage:
        handler = WebhookHandler(settings, dispatcher, processor)
        result = await handler.handle(raw_body, request.headers.get(settings.signature_header))
    """

    def __init__(
        self,
        settings: WebhookSettings,
        dispatcher: Dispatcher,
        processor: Optional[PaystackClient] = None,
    ) -> None:
        if settings.verify_transactions and processor is None:
            raise ValueError("verify_transactions is enabled but no processor client given")
        self._settings = settings
        self._dispatcher = dispatcher
        self._processor = processor

    @property
    def signature_header(self) -> str:
        return self._settings.signature_header

    def authenticate(self, raw_body: bytes, signature: Optional[str]) -> None:
        """Reject the delivery unless the signature matches the raw body.

        Raises:
            WebhookError: INVALID_SIGNATURE
        """
        if not verify_signature(
            raw_body,
            self._settings.signing_secret,
            signature,
            self._settings.signature_algorithm,
        ):
            log_webhook_event(
                logger,
                None,
                result="rejected",
                error="invalid signature",
                has_signature=bool(signature),
            )
            raise WebhookError(ErrorCode.INVALID_SIGNATURE)

    @staticmethod
    def parse_event(raw_body: bytes) -> IncomingEvent:
        """Parse the authenticated body.

        Raises:
            WebhookError: MALFORMED_PAYLOAD
        """
        try:
            return IncomingEvent.model_validate(json.loads(raw_body))
        except (ValueError, ValidationError) as e:
            logger.warning("Authenticated webhook body could not be parsed: %s", e)
            raise WebhookError(ErrorCode.MALFORMED_PAYLOAD) from e

    async def reverify(self, payment: PaymentRecord) -> None:
        """Confirm status and amount with the processor.

        Raises:
            WebhookError: VERIFICATION_FAILED when the processor disagrees
                or does not know the reference.
            ProcessorServiceError: On transport or server errors.
        """
        if self._processor is None:
            raise RuntimeError("No processor client configured for re-verification")

        try:
            verification = await self._processor.verify_transaction(payment.reference)
        except ProcessorServiceError as e:
            # 5xx and transport failures surface as 500 so the sender redelivers
            if not e.is_client_error:
                raise
            log_webhook_event(
                logger,
                "charge.success",
                reference=payment.reference,
                result="rejected",
                error=str(e),
            )
            raise WebhookError(
                ErrorCode.VERIFICATION_FAILED,
                details={"reference": payment.reference},
            ) from e

        if not verification.succeeded or verification.amount != payment.amount:
            log_webhook_event(
                logger,
                "charge.success",
                reference=payment.reference,
                result="rejected",
                error="processor disagrees",
                processor_status=verification.status,
                processor_amount=verification.amount,
                claimed_amount=payment.amount,
            )
            raise WebhookError(
                ErrorCode.VERIFICATION_FAILED,
                details={"reference": payment.reference},
            )

    async def handle(
        self, raw_body: bytes, signature: Optional[str]
    ) -> WebhookAck | WebhookResult:
        """Process one webhook delivery end to end.

        Args:
            raw_body: Request body bytes exactly as received.
            signature: Value of the signature header, if present.

        Returns:
            WebhookAck for ignored event types, WebhookResult on success.

        Raises:
            WebhookError: For signature, payload, verification and
                dispatch failures.
        """
        self.authenticate(raw_body, signature)
        event = self.parse_event(raw_body)

        if not event.is_charge_success:
            log_webhook_event(logger, event.type, result="ignored")
            return WebhookAck(received=True)

        try:
            payment = PaymentRecord.model_validate(event.data)
        except ValidationError as e:
            logger.warning("charge.success without a usable payment record: %s", e)
            raise WebhookError(ErrorCode.MALFORMED_PAYLOAD) from e

        log_webhook_event(logger, event.type, reference=payment.reference, result="received")

        if self._settings.verify_transactions:
            await self.reverify(payment)

        outcome = await self._dispatcher.dispatch(payment)

        log_webhook_event(logger, event.type, reference=payment.reference, result="success")
        return WebhookResult(
            reference=payment.reference,
            message=self._dispatcher.success_message,
            channels=outcome.channels,
            details=outcome.details,
        )
