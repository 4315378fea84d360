"""Payment flow services."""

from checkout.services.flow import FlowPhase, PaymentFlow, PaymentFlowState, transition
from checkout.services.payment_service import (
    CallbackOutcome,
    FlowRegistry,
    InitiationOutcome,
    PaymentFlowService,
)
from checkout.services.poller import PollingPolicy, PollOutcome, PollStopReason, StatusPoller

__all__ = [
    "CallbackOutcome",
    "FlowPhase",
    "FlowRegistry",
    "InitiationOutcome",
    "PaymentFlow",
    "PaymentFlowService",
    "PaymentFlowState",
    "PollOutcome",
    "PollStopReason",
    "PollingPolicy",
    "StatusPoller",
    "get_payment_flow_service",
    "transition",
]

_service: PaymentFlowService | None = None


def get_payment_flow_service() -> PaymentFlowService:
    """Get the payment flow service (singleton)."""
    global _service
    if _service is None:
        from checkout.payments.providers import get_payment_client

        _service = PaymentFlowService(get_payment_client())
    return _service
