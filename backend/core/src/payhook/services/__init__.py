"""Services for the payhook webhook receiver.

The pipeline modules (dispatch, webhook_handler) depend on payhook.config
and are imported directly rather than re-exported here.
"""

from .commerce_client import CommerceServiceError, ShopifyClient
from .email_service import EmailClient, EmailServiceError
from .paystack_client import PaystackClient, ProcessorServiceError, TransactionVerification
from .signature import compute_signature, verify_signature
from .ssm_service import SecretStore, SSMServiceError, get_secret_store

__all__ = [
    "CommerceServiceError",
    "ShopifyClient",
    "EmailClient",
    "EmailServiceError",
    "PaystackClient",
    "ProcessorServiceError",
    "TransactionVerification",
    "compute_signature",
    "verify_signature",
    "SecretStore",
    "SSMServiceError",
    "get_secret_store",
]
