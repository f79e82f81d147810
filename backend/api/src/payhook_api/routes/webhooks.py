"""Webhook endpoint for the payment processor.

This endpoint does NOT use API authentication: deliveries are
authenticated by the HMAC signature over the raw body.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

from payhook.models.errors import ErrorResponse, WebhookError
from payhook.services.webhook_handler import WebhookHandler
from payhook.utils.logging import get_logger
from payhook_api.dependencies import get_webhook_handler
from payhook_api.models.webhooks import (
    WebhookErrorResponse,
    WebhookSuccessResponse,
)

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])


@router.post(
    "/webhook",
    summary="Receive payment processor webhook events",
    description="""
Endpoint for processor webhook deliveries. Handles:
- charge.success: re-verifies the transaction, then sends notification
  emails or creates a commerce order depending on deployment
- any other event type: acknowledged without side effects

**No API authentication** - the signature header is verified against the
raw request body with the shared secret.
""",
    responses={
        200: {
            "description": "Event handled, or acknowledged and ignored",
            "model": WebhookSuccessResponse,
        },
        400: {
            "description": "Malformed payload or transaction verification failed",
            "model": WebhookErrorResponse,
        },
        401: {"description": "Missing or invalid signature", "model": WebhookErrorResponse},
        405: {"description": "Method not allowed", "model": WebhookErrorResponse},
        500: {"description": "Processing failed", "model": WebhookErrorResponse},
    },
)
async def receive_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> JSONResponse:
    """Handle one webhook delivery.

    Signature verification needs the body exactly as sent, so the raw
    bytes are read here and never re-serialized.
    """
    raw_body = await request.body()
    signature = request.headers.get(handler.signature_header)

    try:
        result = await handler.handle(raw_body, signature)
    except WebhookError:
        raise
    except Exception as e:
        logger.exception("Webhook processing failed: %s", e)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e) or type(e).__name__).model_dump(
                exclude_none=True
            ),
        )

    return JSONResponse(status_code=HTTP_200_OK, content=result.model_dump(mode="json"))
