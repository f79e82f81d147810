"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- Helper functions for webhook and dispatch logging

Usage:
    from payhook.utils.logging import get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Verifying transaction", extra={"reference": "T123"})
"""

import logging
import uuid
from collections.abc import Iterable
from contextvars import ContextVar
from typing import Any

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate a new correlation ID.

    Returns:
        UUID-based correlation ID string
    """
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Correlation ID prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; an existing payhook handler is reused.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for existing in root.handlers:
        if isinstance(existing.formatter, StructuredFormatter):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(
        StructuredFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root.addHandler(handler)


def log_webhook_event(
    logger: logging.Logger,
    event_type: str | None,
    *,
    reference: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a webhook event with structured context.

    Args:
        logger: Logger instance
        event_type: Processor event type (e.g., "charge.success")
        reference: Transaction reference if available
        result: Processing result (received, ignored, rejected, success, error)
        error: Error message if processing failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"event_type": event_type or "unknown"}

    if reference:
        context["reference"] = reference
    if result:
        context["result"] = result
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Webhook event: {context['event_type']}"]
    if reference:
        msg_parts.append(f"reference={reference}")
    if result:
        msg_parts.append(f"result={result}")
    if error:
        msg_parts.append(f"error={error}")
    for key, value in extra.items():
        msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if result == "error":
        logger.error(message, extra=context)
    elif result in ("rejected", "ignored"):
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)


def log_dispatch(
    logger: logging.Logger,
    reference: str,
    channels: Iterable[Any],
) -> None:
    """Log the outcome of every downstream channel for one payment.

    Args:
        logger: Logger instance
        reference: Transaction reference
        channels: ChannelOutcome-like objects with channel/status/detail
    """
    outcomes = list(channels)
    summary = ", ".join(f"{c.channel}={c.status}" for c in outcomes)
    message = f"Dispatch for {reference}: {summary or 'no channels'}"

    if any(c.status == "failed" for c in outcomes):
        logger.error(message, extra={"reference": reference})
    else:
        logger.info(message, extra={"reference": reference})
