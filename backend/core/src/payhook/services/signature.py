"""HMAC signature verification for processor webhooks.

The processor signs the request body it sends with the shared secret and
puts the hex digest in a header. The digest must be recomputed over the
body bytes exactly as received: re-serializing parsed JSON can change
whitespace or key order and breaks the comparison.
"""

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "sha512"


def compute_signature(
    raw_body: bytes, secret: str, algorithm: str = DEFAULT_ALGORITHM
) -> str:
    """Compute the hex HMAC digest of ``raw_body`` keyed with ``secret``.

    Args:
        raw_body: Request body bytes as received.
        secret: Shared signing secret.
        algorithm: hashlib digest name (sha512 for Paystack).

    Returns:
        Lowercase hex digest.
    """
    digestmod = getattr(hashlib, algorithm)
    return hmac.new(secret.encode("utf-8"), raw_body, digestmod).hexdigest()


def verify_signature(
    raw_body: bytes,
    secret: str,
    signature: str | None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> bool:
    """Check a header-supplied signature against the raw body.

    Uses a constant-time comparison. A missing signature or an empty secret
    never authenticates.

    Returns:
        True if the signature matches.
    """
    if not signature or not secret:
        logger.warning("Signature check skipped: missing signature or secret")
        return False

    expected = compute_signature(raw_body, secret, algorithm)
    # Compare as bytes: header values are not guaranteed to be ASCII.
    # The header is compared as supplied, with no case or whitespace folding.
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
