"""Shared fixtures and test doubles."""

import json
import os
from collections.abc import Callable

import httpx
import pytest
import pytest_asyncio

# Required setting; must be present before checkout.core.config is imported
os.environ.setdefault("API_SECRET_KEY", "test-secret")

from checkout.core.config import Settings
from checkout.payments.builder import build_payment_request
from checkout.payments.credentials import StaticSecretProvider
from checkout.payments.environments import ApiEnvironment
from checkout.payments.providers.base import PaymentApiClient
from checkout.payments.providers.tokenio import TokenPaymentClient
from checkout.payments.schemas import PaymentInitiation, PaymentStatusDetails
from checkout.payments.state import generate_state

SANDBOX_KEY = "c2FuZGJveC1rZXk="
SANDBOX_URL = "https://api.sandbox.token.io"
REDIRECT_URL = "https://app.sandbox.token.io/app/request-token/rq:abc123"


def payment_json(
    payment_id: str = "pm2:12345",
    status: str = "INITIATION_PENDING",
    ref_id: str = "AB12CD34",
    redirect_url: str | None = REDIRECT_URL,
    currency: str = "GBP",
    value: str = "10.00",
    reason: str | None = "Awaiting authorisation",
) -> dict:
    """Provider payment envelope. Pass redirect_url=None for the GET shape."""
    payment = {
        "id": payment_id,
        "memberId": "m:member:5zKtXEAq",
        "initiation": {
            "refId": ref_id,
            "remittanceInformationPrimary": f"RP{ref_id}",
            "remittanceInformationSecondary": f"RS{ref_id}",
            "amount": {"currency": currency, "value": value},
            "localInstrument": "FASTER_PAYMENTS",
            "creditor": {"name": "Test Creditor", "sortCode": "040004", "accountNumber": "12345678"},
            "callbackUrl": "paymentdemoapp://payment-complete",
            "callbackState": "state",
            "flowType": "FULL_HOSTED_PAGES",
        },
        "createdDateTime": "2025-01-01T00:00:00Z",
        "updatedDateTime": "2025-01-01T00:00:00Z",
        "status": status,
    }
    if reason is not None:
        payment["statusReasonInformation"] = reason
    if redirect_url is not None:
        payment["authentication"] = {"redirectUrl": redirect_url}
    return {"payment": payment}


class RecordingHandler:
    """httpx.MockTransport handler that records requests.

    ``responder`` builds the response for each request; it may raise an
    httpx.TransportError to simulate a network failure.
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


class FakePaymentClient(PaymentApiClient):
    """In-memory API client double with call counters.

    ``statuses`` is consumed one item per status call; an item is either a
    raw status string or an exception to raise. The last item repeats.
    """

    def __init__(self, statuses: list[str | Exception] | None = None) -> None:
        self.statuses = list(statuses or ["execution_successful"])
        self.initiate_calls = 0
        self.status_calls = 0
        self.initiate_error: Exception | None = None

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
        self.initiate_calls += 1
        if self.initiate_error is not None:
            raise self.initiate_error

        request, state = build_payment_request(
            currency=currency,
            amount_value=amount_value,
            local_instrument=local_instrument,
            creditor_name=creditor_name,
            creditor_iban=creditor_iban,
            creditor_sort_code=creditor_sort_code,
            creditor_account_number=creditor_account_number,
        )
        return PaymentInitiation(
            redirect_url=REDIRECT_URL,
            state=state,
            ref_id=request.initiation.ref_id,
            payment_id=f"pm2:{request.initiation.ref_id}",
        )

    async def get_payment_status(
        self,
        payment_id: str,
        environment: ApiEnvironment,
    ) -> PaymentStatusDetails:
        index = min(self.status_calls, len(self.statuses) - 1)
        self.status_calls += 1
        item = self.statuses[index]
        if isinstance(item, Exception):
            raise item
        return PaymentStatusDetails(
            status=item,
            status_reason_information=f"reason for {item}",
            currency="GBP",
            value="10.00",
            ref_id="AB12CD34",
        )


@pytest.fixture
def config() -> Settings:
    """Settings isolated from the process environment file."""
    return Settings(
        _env_file=None,
        environment="sandbox",
        api_key_sandbox=SANDBOX_KEY,
        api_key_dev=None,
        api_key_beta=None,
        base_url_sandbox=SANDBOX_URL,
        api_secret_key="test-secret",
    )


@pytest.fixture
def secret_provider() -> StaticSecretProvider:
    return StaticSecretProvider({ApiEnvironment.SANDBOX: SANDBOX_KEY})


@pytest.fixture
def make_client(config, secret_provider) -> Callable[..., tuple[TokenPaymentClient, RecordingHandler]]:
    """Build a live client wired to a mock transport."""

    def factory(responder: Callable[[httpx.Request], httpx.Response]):
        handler = RecordingHandler(responder)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = TokenPaymentClient(
            secret_provider=secret_provider,
            http_client=http_client,
            config=config,
        )
        return client, handler

    return factory


@pytest.fixture
def fake_client() -> FakePaymentClient:
    return FakePaymentClient()


@pytest.fixture
def fresh_initiation() -> PaymentInitiation:
    return PaymentInitiation(
        redirect_url=REDIRECT_URL,
        state=generate_state(),
        ref_id="AB12CD34",
        payment_id="pm2:AB12CD34",
    )


@pytest_asyncio.fixture
async def service(fake_client, config):
    from checkout.services import PaymentFlowService

    yield PaymentFlowService(fake_client, config=config)
