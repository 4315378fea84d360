"""Payment API clients."""

from checkout.payments.providers.base import PaymentApiClient


def get_payment_client() -> PaymentApiClient:
    """Factory function to get configured payment API client.

    Returns client based on PAYMENT_API_MODE setting.
    """
    from checkout.core.config import settings

    if settings.payment_api_mode == "mock":
        from checkout.payments.providers.mock.provider import MockPaymentApiClient

        return MockPaymentApiClient()

    if settings.payment_api_mode == "live":
        from checkout.payments.providers.tokenio.client import TokenPaymentClient

        return TokenPaymentClient()

    raise ValueError(f"Unknown payment API mode: {settings.payment_api_mode}")


__all__ = [
    "PaymentApiClient",
    "get_payment_client",
]
