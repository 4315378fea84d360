"""Payment processing module."""

from checkout.payments.callback import parse_callback
from checkout.payments.environments import ApiEnvironment
from checkout.payments.providers import PaymentApiClient, get_payment_client
from checkout.payments.schemas import CallbackParams, PaymentInitiation, PaymentStatusDetails
from checkout.payments.state import generate_state, verify_state
from checkout.payments.status import PaymentStatus, map_status

__all__ = [
    "ApiEnvironment",
    "CallbackParams",
    "PaymentApiClient",
    "PaymentInitiation",
    "PaymentStatus",
    "PaymentStatusDetails",
    "generate_state",
    "get_payment_client",
    "map_status",
    "parse_callback",
    "verify_state",
]
