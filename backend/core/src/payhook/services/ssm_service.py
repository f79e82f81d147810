"""Webhook secrets stored in AWS SSM Parameter Store.

Deployments that keep secrets out of the Lambda environment put them under
one path prefix, e.g. ``/payhook/prod/paystack_secret_key``. The settings
loader asks for the secrets its dispatch mode needs; they are read in a
single ``GetParameters`` call.
"""

import logging
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when secrets cannot be read from Parameter Store."""

    pass


class SecretStore:
    """SecureString parameters under one prefix.

    Usage:
        store = SecretStore("/payhook/prod")
        secrets = store.fetch({"signing_secret": "paystack_secret_key"})
    """

    def __init__(self, prefix: str, client: Optional[Any] = None) -> None:
        self.prefix = prefix.rstrip("/")
        self._client = client or boto3.client("ssm")

    def parameter_name(self, key: str) -> str:
        return f"{self.prefix}/{key}"

    def fetch(self, keys: Mapping[str, str]) -> dict[str, str]:
        """Read several secrets at once.

        Args:
            keys: Caller's name for each secret -> parameter key under the prefix.

        Returns:
            Caller's name -> decrypted value.

        Raises:
            SSMServiceError: If the call fails or any parameter is missing.
        """
        if not keys:
            return {}

        by_name = {self.parameter_name(key): field for field, key in keys.items()}
        logger.info("Fetching %d secret(s) under %s", len(by_name), self.prefix)

        try:
            response = self._client.get_parameters(
                Names=list(by_name), WithDecryption=True
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            raise SSMServiceError(
                f"Could not read secrets under {self.prefix} ({code})"
            ) from e

        invalid = response.get("InvalidParameters") or []
        if invalid:
            raise SSMServiceError(
                f"SSM parameters not found: {', '.join(sorted(invalid))}"
            )

        return {by_name[p["Name"]]: p["Value"] for p in response.get("Parameters", [])}


@lru_cache(maxsize=4)
def get_secret_store(prefix: str) -> SecretStore:
    """Shared store per prefix, so the boto3 client is built once."""
    return SecretStore(prefix)


def reset_secret_stores() -> None:
    """Drop cached stores. Used by tests."""
    get_secret_store.cache_clear()
