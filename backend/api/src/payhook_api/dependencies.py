"""FastAPI dependency injection providers for the webhook pipeline.

Service Dependency Graph:
    WebhookSettings (cached via get_settings)
        └── httpx.AsyncClient (one per request via get_http_client)
                ├── PaystackClient (when verify_transactions)
                └── Dispatcher (email or commerce, by dispatch_mode)
                        └── WebhookHandler

Testing:
    Override get_settings and get_http_client through
    ``app.dependency_overrides``; use reset_dependencies() to drop the
    cached settings between tests.
"""

from collections.abc import AsyncIterator
from functools import lru_cache

import httpx
from fastapi import Depends

from payhook.config import WebhookSettings, load_settings
from payhook.services.dispatch import build_dispatcher
from payhook.services.paystack_client import PaystackClient
from payhook.services.webhook_handler import WebhookHandler


@lru_cache
def get_settings() -> WebhookSettings:
    """Get settings loaded once from the environment."""
    return load_settings()


async def get_http_client(
    settings: WebhookSettings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    """Open an HTTP client for the duration of one request."""
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


def get_webhook_handler(
    settings: WebhookSettings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> WebhookHandler:
    """Assemble the pipeline for one request."""
    processor = None
    if settings.verify_transactions:
        processor = PaystackClient(
            http,
            api_token=settings.processor_api_token or settings.signing_secret,
            base_url=settings.processor_base_url,
        )
    return WebhookHandler(settings, build_dispatcher(settings, http), processor)


def reset_dependencies() -> None:
    """Clear cached settings."""
    get_settings.cache_clear()
