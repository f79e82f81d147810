"""Standard error codes for the webhook pipeline.

Every rejection the pipeline can produce maps to one ErrorCode, which
carries a human-readable message and the HTTP status the API layer
returns for it.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error codes raised by the webhook pipeline."""

    INVALID_SIGNATURE = "ERR_SIGNATURE"
    MALFORMED_PAYLOAD = "ERR_PAYLOAD"
    VERIFICATION_FAILED = "ERR_VERIFICATION"
    MISSING_VARIANT_ID = "ERR_PRECONDITION"
    DISPATCH_FAILED = "ERR_DISPATCH"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_SIGNATURE: "Invalid signature",
    ErrorCode.MALFORMED_PAYLOAD: "Malformed webhook payload",
    ErrorCode.VERIFICATION_FAILED: "Transaction verification failed",
    ErrorCode.MISSING_VARIANT_ID: "Variant ID not found in metadata",
    ErrorCode.DISPATCH_FAILED: "Downstream delivery failed",
}

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_SIGNATURE: 401,
    ErrorCode.MALFORMED_PAYLOAD: 400,
    ErrorCode.VERIFICATION_FAILED: 400,
    ErrorCode.MISSING_VARIANT_ID: 500,
    ErrorCode.DISPATCH_FAILED: 500,
}


class ErrorResponse(BaseModel):
    """JSON body returned for every failed webhook request."""

    model_config = ConfigDict(extra="allow")

    error: str
    code: Optional[str] = None


class WebhookError(Exception):
    """Exception raised by the webhook pipeline.

    Converted to an HTTP response by the API layer using ERROR_STATUS.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.code]

    def to_response(self) -> ErrorResponse:
        """Convert this exception to the JSON error body."""
        return ErrorResponse(error=self.message, code=self.code.value, **self.details)
