"""API routes package.

- webhooks: processor webhook receiver

All routers are registered in main.py with /api prefix.
"""

from payhook_api.routes.webhooks import router as webhooks_router

__all__ = ["webhooks_router"]
