"""Response models documenting the webhook endpoint contract.

The pipeline's own result models (payhook.models.results) are what the
route serializes; these aliases give them stable names in the OpenAPI
schema.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from payhook.models.results import ChannelOutcome, WebhookAck, WebhookResult

WebhookAckResponse = WebhookAck
WebhookSuccessResponse = WebhookResult


class WebhookErrorResponse(BaseModel):
    """Error response for rejected or failed deliveries."""

    model_config = ConfigDict(extra="allow")

    error: str = Field(..., examples=["Invalid signature"])
    code: Optional[str] = Field(default=None, examples=["ERR_SIGNATURE"])
    reference: Optional[str] = None
    channels: Optional[list[ChannelOutcome]] = None
