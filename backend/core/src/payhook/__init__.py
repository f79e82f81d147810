"""Core library for the payhook payment-webhook receiver.

Contains the event models, signature verification, outbound clients
(processor, email, commerce) and the webhook pipeline. The HTTP surface
lives in the separate ``payhook_api`` package.
"""

__version__ = "0.1.0"
