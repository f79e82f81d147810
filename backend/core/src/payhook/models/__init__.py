"""Models for webhook events, pipeline results and errors."""

from .errors import ERROR_MESSAGES, ERROR_STATUS, ErrorCode, ErrorResponse, WebhookError
from .events import (
    CHARGE_SUCCESS,
    FIELD_DEFAULTS,
    Customer,
    IncomingEvent,
    Metadata,
    MetadataField,
    PaymentRecord,
)
from .results import ChannelOutcome, DispatchOutcome, WebhookAck, WebhookResult

__all__ = [
    # Errors
    "ERROR_MESSAGES",
    "ERROR_STATUS",
    "ErrorCode",
    "ErrorResponse",
    "WebhookError",
    # Events
    "CHARGE_SUCCESS",
    "FIELD_DEFAULTS",
    "Customer",
    "IncomingEvent",
    "Metadata",
    "MetadataField",
    "PaymentRecord",
    # Results
    "ChannelOutcome",
    "DispatchOutcome",
    "WebhookAck",
    "WebhookResult",
]
