"""Mock payment API client."""

import asyncio
from collections import OrderedDict

from checkout.core.config import Settings, settings
from checkout.core.logging import get_logger
from checkout.payments.builder import build_payment_request
from checkout.payments.environments import ApiEnvironment
from checkout.payments.providers.base import PaymentApiClient
from checkout.payments.schemas import PaymentInitiation, PaymentRequest, PaymentStatusDetails

logger = get_logger(__name__)

MOCK_REDIRECT_URL = "https://app.sandbox.token.io/payment/redirect/mock-success"
MOCK_STATUS = "execution_successful"
MAX_STORED_PAYMENTS = 1000


class MockPaymentApiClient(PaymentApiClient):
    """Mock client for local development and UI tests.

    Builds real requests (fresh refId and state) but never calls the network.
    Every payment reports ``execution_successful``. Only the most recent
    ``max_payments`` requests are remembered; older ids fall back to the
    canned GBP 10.00 answer.
    """

    def __init__(
        self,
        config: Settings | None = None,
        latency: float = 0.0,
        max_payments: int = MAX_STORED_PAYMENTS,
    ) -> None:
        self.config = config or settings
        self.latency = latency
        self.max_payments = max_payments
        self._payments: OrderedDict[str, PaymentRequest] = OrderedDict()

    async def initiate_payment(
        self,
        environment: ApiEnvironment,
        currency: str,
        amount_value: str,
        local_instrument: str,
        creditor_name: str,
        creditor_iban: str | None = None,
        creditor_sort_code: str | None = None,
        creditor_account_number: str | None = None,
    ) -> PaymentInitiation:
        request, state = build_payment_request(
            currency=currency,
            amount_value=amount_value,
            local_instrument=local_instrument,
            creditor_name=creditor_name,
            creditor_iban=creditor_iban,
            creditor_sort_code=creditor_sort_code,
            creditor_account_number=creditor_account_number,
            config=self.config,
        )
        if self.latency:
            await asyncio.sleep(self.latency)

        payment_id = f"mock-{request.initiation.ref_id}"
        self._payments[payment_id] = request
        while len(self._payments) > self.max_payments:
            self._payments.popitem(last=False)
        logger.info("Mock payment initiated: id=%s, env=%s", payment_id, environment.value)

        return PaymentInitiation(
            redirect_url=MOCK_REDIRECT_URL,
            state=state,
            ref_id=request.initiation.ref_id,
            payment_id=payment_id,
        )

    async def get_payment_status(
        self,
        payment_id: str,
        environment: ApiEnvironment,
    ) -> PaymentStatusDetails:
        if self.latency:
            await asyncio.sleep(self.latency)

        request = self._payments.get(payment_id)
        if request is None:
            return PaymentStatusDetails(
                status=MOCK_STATUS,
                status_reason_information="Payment completed successfully",
                currency="GBP",
                value="10.00",
                ref_id="MOCK_REF_123",
            )

        initiation = request.initiation
        return PaymentStatusDetails(
            status=MOCK_STATUS,
            status_reason_information="Payment completed successfully",
            currency=initiation.amount.currency,
            value=initiation.amount.value,
            ref_id=initiation.ref_id,
        )
