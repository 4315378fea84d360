"""Service dependencies."""

from checkout.services import PaymentFlowService, get_payment_flow_service


def get_service() -> PaymentFlowService:
    """Provide the payment flow service. Overridden in tests."""
    return get_payment_flow_service()
