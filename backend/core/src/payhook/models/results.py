"""Results produced by the webhook pipeline."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

ChannelStatus = Literal["sent", "failed", "skipped"]


class ChannelOutcome(BaseModel):
    """Outcome of one downstream call (an email or an order mutation)."""

    channel: str = Field(..., examples=["operator_email", "customer_email", "order"])
    status: ChannelStatus
    detail: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == "failed"


class DispatchOutcome(BaseModel):
    """Everything a dispatcher did for one payment."""

    channels: list[ChannelOutcome] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return any(c.failed for c in self.channels)


class WebhookAck(BaseModel):
    """Acknowledgment for events that need no processing."""

    received: bool = True


class WebhookResult(BaseModel):
    """Successful handling of a charge.success event."""

    success: bool = True
    reference: str
    message: str
    channels: list[ChannelOutcome] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)
