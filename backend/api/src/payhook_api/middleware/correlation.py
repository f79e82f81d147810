"""Correlation ID middleware for request tracing.

Extracts X-Correlation-ID header from incoming requests or generates a new one.
Makes correlation ID available throughout the request lifecycle via contextvars,
so every log line for one webhook delivery carries the same prefix.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from payhook.utils.logging import clear_correlation_id, set_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware that manages correlation IDs for request tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        incoming_id = request.headers.get(CORRELATION_ID_HEADER)
        correlation_id = set_correlation_id(incoming_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()
