"""Configuration for the webhook receiver.

Settings are an explicit, immutable structure handed to the pipeline at
construction. Only ``load_settings`` touches the process environment (and,
optionally, SSM Parameter Store), so the handler itself can be tested with
plain ``WebhookSettings(...)`` instances.
"""

import logging
import os
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from payhook.services.ssm_service import SSMServiceError, get_secret_store

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the receiver cannot be configured."""

    pass


class DispatchMode(str, Enum):
    """Downstream action performed for a verified payment."""

    NOTIFY = "notify"
    NOTIFY_WITH_RECEIPT = "notify_with_receipt"
    ORDER = "order"

    @property
    def sends_email(self) -> bool:
        return self in (DispatchMode.NOTIFY, DispatchMode.NOTIFY_WITH_RECEIPT)


class WebhookSettings(BaseModel):
    """Secrets, endpoints and behaviour switches for one deployment."""

    model_config = ConfigDict(frozen=True)

    signing_secret: str = Field(..., min_length=1)
    processor_api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the verify endpoint; defaults to signing_secret",
    )
    processor_base_url: str = "https://api.paystack.co"
    signature_header: str = "x-paystack-signature"
    signature_algorithm: str = "sha512"
    verify_transactions: bool = True

    dispatch_mode: DispatchMode = DispatchMode.NOTIFY

    email_api_token: Optional[str] = None
    email_api_url: str = "https://api.resend.com/emails"
    email_sender: str = "Orders <onboarding@resend.dev>"
    notify_address: Optional[str] = None

    commerce_store_domain: Optional[str] = None
    commerce_access_token: Optional[str] = None
    commerce_api_version: str = "2024-01"

    currency: str = "NGN"
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _default_processor_token(cls, data: Any) -> Any:
        # The processor's secret key both signs webhooks and authenticates API calls
        if isinstance(data, dict) and not data.get("processor_api_token"):
            data = {**data, "processor_api_token": data.get("signing_secret")}
        return data

    @model_validator(mode="after")
    def _check_mode_requirements(self) -> "WebhookSettings":
        missing: list[str] = []
        if self.dispatch_mode.sends_email:
            if not self.email_api_token:
                missing.append("email_api_token")
            if not self.notify_address:
                missing.append("notify_address")
        if self.dispatch_mode is DispatchMode.ORDER:
            if not self.commerce_store_domain:
                missing.append("commerce_store_domain")
            if not self.commerce_access_token:
                missing.append("commerce_access_token")
        if missing:
            raise ValueError(
                f"dispatch_mode={self.dispatch_mode.value} requires: {', '.join(missing)}"
            )
        return self


# Settings field -> environment variable
ENV_VARS: dict[str, str] = {
    "signing_secret": "PAYSTACK_SECRET_KEY",
    "processor_api_token": "PAYSTACK_API_TOKEN",
    "processor_base_url": "PAYSTACK_BASE_URL",
    "signature_header": "PAYHOOK_SIGNATURE_HEADER",
    "verify_transactions": "PAYHOOK_VERIFY_TRANSACTIONS",
    "dispatch_mode": "PAYHOOK_DISPATCH_MODE",
    "email_api_token": "RESEND_API_KEY",
    "email_api_url": "EMAIL_API_URL",
    "email_sender": "EMAIL_SENDER",
    "notify_address": "NOTIFY_EMAIL",
    "commerce_store_domain": "SHOPIFY_STORE",
    "commerce_access_token": "SHOPIFY_ACCESS_TOKEN",
    "commerce_api_version": "SHOPIFY_API_VERSION",
    "currency": "PAYHOOK_CURRENCY",
    "http_timeout_seconds": "PAYHOOK_HTTP_TIMEOUT",
}

SSM_PREFIX_VAR = "PAYHOOK_SSM_PREFIX"

# Secrets that may live in SSM Parameter Store under PAYHOOK_SSM_PREFIX
SSM_PARAMETERS: dict[str, str] = {
    "signing_secret": "paystack_secret_key",
    "email_api_token": "resend_api_key",
    "commerce_access_token": "shopify_access_token",
}


def _secrets_needed(mode: str) -> list[str]:
    needed = ["signing_secret"]
    if mode == DispatchMode.ORDER.value:
        needed.append("commerce_access_token")
    else:
        needed.append("email_api_token")
    return needed


def load_settings(environ: Optional[Mapping[str, str]] = None) -> WebhookSettings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read instead of os.environ.

    Returns:
        Validated WebhookSettings.

    Raises:
        ConfigError: If required values are missing or invalid.
    """
    env = os.environ if environ is None else environ

    raw: dict[str, Any] = {}
    for field_name, var in ENV_VARS.items():
        value = env.get(var)
        if value is not None and value != "":
            raw[field_name] = value

    prefix = env.get(SSM_PREFIX_VAR)
    if prefix:
        mode = str(raw.get("dispatch_mode", DispatchMode.NOTIFY.value))
        wanted = {
            field_name: SSM_PARAMETERS[field_name]
            for field_name in _secrets_needed(mode)
            if field_name not in raw
        }
        try:
            raw.update(get_secret_store(prefix).fetch(wanted))
        except SSMServiceError as e:
            raise ConfigError(str(e)) from e

    if "signing_secret" not in raw:
        raise ConfigError(f"{ENV_VARS['signing_secret']} is not set")

    try:
        settings = WebhookSettings(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid webhook configuration: {e}") from e

    logger.info(
        "Webhook settings loaded: mode=%s verify=%s",
        settings.dispatch_mode.value,
        settings.verify_transactions,
    )
    return settings
