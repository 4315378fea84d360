"""Mock payment provider."""

from checkout.payments.providers.mock.provider import MockPaymentApiClient

__all__ = [
    "MockPaymentApiClient",
]
