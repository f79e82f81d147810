"""FastAPI application for the payhook webhook receiver.

Exposes:
- POST /api/webhook: processor webhook deliveries
- GET /api/ping: health check

Runs on AWS Lambda through Mangum, or locally with uvicorn.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from mangum import Mangum

from payhook.utils.logging import configure_logging
from payhook_api import __version__
from payhook_api.exceptions import register_exception_handlers
from payhook_api.middleware.correlation import CorrelationIdMiddleware
from payhook_api.routes.webhooks import router as webhooks_router

configure_logging()

app = FastAPI(
    title="Payhook",
    description="Payment webhook receiver: verifies charges and fulfils them",
    version=__version__,
)

app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(webhooks_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "payhook",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = False) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "payhook_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["backend/api/src", "backend/core/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
