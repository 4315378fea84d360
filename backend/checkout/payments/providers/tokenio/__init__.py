"""Live hosted checkout provider."""

from checkout.payments.providers.tokenio.client import TokenPaymentClient, extract_error_message

__all__ = [
    "TokenPaymentClient",
    "extract_error_message",
]
