"""FastAPI application exposing the payhook webhook endpoint."""

__version__ = "0.1.0"
