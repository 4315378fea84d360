"""Mock payment API client tests."""

import pytest

from checkout.payments.environments import ApiEnvironment
from checkout.payments.providers.mock import MockPaymentApiClient
from checkout.payments.providers.mock.provider import MOCK_REDIRECT_URL

pytestmark = [pytest.mark.asyncio]

EUR_PAYMENT = {
    "environment": ApiEnvironment.SANDBOX,
    "currency": "EUR",
    "amount_value": "12.50",
    "local_instrument": "SEPA_INSTANT",
    "creditor_name": "ACME GmbH",
    "creditor_iban": "DE89370400440532013000",
}


class TestMockClient:
    """Offline payment API."""

    async def test_echoes_stored_payment(self, config):
        client = MockPaymentApiClient(config)

        initiation = await client.initiate_payment(**EUR_PAYMENT)
        details = await client.get_payment_status(initiation.payment_id, ApiEnvironment.SANDBOX)

        assert initiation.redirect_url == MOCK_REDIRECT_URL
        assert details.status == "execution_successful"
        assert (details.currency, details.value, details.ref_id) == ("EUR", "12.50", initiation.ref_id)

    async def test_store_is_bounded(self, config):
        client = MockPaymentApiClient(config, max_payments=2)

        first = await client.initiate_payment(**EUR_PAYMENT)
        await client.initiate_payment(**EUR_PAYMENT)
        last = await client.initiate_payment(**EUR_PAYMENT)

        forgotten = await client.get_payment_status(first.payment_id, ApiEnvironment.SANDBOX)
        kept = await client.get_payment_status(last.payment_id, ApiEnvironment.SANDBOX)

        assert (forgotten.currency, forgotten.value, forgotten.ref_id) == ("GBP", "10.00", "MOCK_REF_123")
        assert kept.ref_id == last.ref_id
