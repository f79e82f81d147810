"""API response models for the webhook endpoint."""

from payhook_api.models.webhooks import (
    WebhookAckResponse,
    WebhookErrorResponse,
    WebhookSuccessResponse,
)

__all__ = [
    "WebhookAckResponse",
    "WebhookErrorResponse",
    "WebhookSuccessResponse",
]
