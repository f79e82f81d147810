"""FastAPI exception handlers for the webhook API.

Every error response has the same shape, ``{"error": ..., "code": ...}``,
plus whatever context the pipeline attached (reference, channel outcomes).

Status mapping lives with the error codes (payhook.models.errors):
- 401: signature missing or invalid
- 400: malformed payload, processor verification failed
- 405: wrong HTTP method (from routing)
- 500: missing variant id, downstream delivery failed, configuration errors

Usage:
    from payhook_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from payhook.config import ConfigError
from payhook.models.errors import ErrorResponse, WebhookError

logger = logging.getLogger(__name__)


async def webhook_error_handler(request: Request, exc: WebhookError) -> JSONResponse:
    """Convert a WebhookError to its JSON response and status."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json", exclude_none=True),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing errors (404, 405) in the webhook error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    """Missing or invalid configuration is a server-side failure."""
    logger.error("Webhook receiver is misconfigured: %s", exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Webhook receiver is not configured").model_dump(
            exclude_none=True
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(WebhookError, webhook_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConfigError, config_error_handler)  # type: ignore[arg-type]
