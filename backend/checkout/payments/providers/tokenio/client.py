"""Live client for the provider's payments API."""

import json
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from checkout.core.config import Settings, settings
from checkout.core.exceptions import PaymentApiError, PaymentDecodingError, PaymentNetworkError
from checkout.core.logging import get_logger, mask_headers
from checkout.payments.builder import build_payment_request
from checkout.payments.credentials import SecretProvider, SettingsSecretProvider
from checkout.payments.environments import ApiEnvironment
from checkout.payments.providers.base import PaymentApiClient
from checkout.payments.schemas import (
    PaymentInitiation,
    PaymentResponse,
    PaymentStatusDetails,
    PaymentStatusResponse,
)

logger = get_logger(__name__)

PAYMENTS_PATH = "/v2/payments"

# Keys tried, in order, for a human-readable message in error bodies
ERROR_MESSAGE_KEYS = ("message", "error_description", "error")


def extract_error_message(response: httpx.Response) -> tuple[str, Any]:
    """Build error message from a non-2xx response.

    Returns:
        Tuple of (message, parsed body or raw text)
    """
    message = f"Payment API Error: {response.status_code}"

    try:
        body: Any = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return message, response.text or None

    if isinstance(body, dict):
        for key in ERROR_MESSAGE_KEYS:
            detail = body.get(key)
            if isinstance(detail, str) and detail:
                message = f"{message} - {detail}"
                break

    return message, body


class TokenPaymentClient(PaymentApiClient):
    """HTTP client for the hosted checkout payments API.

    Pass ``http_client`` to share a connection pool (or a mock transport in
    tests). An injected client stays owned by the caller; ``aclose`` only
    closes the client this instance opened itself on first use.
    """

    def __init__(
        self,
        secret_provider: SecretProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        config: Settings | None = None,
    ) -> None:
        self.config = config or settings
        self.secret_provider = secret_provider or SettingsSecretProvider(self.config)
        self._http_client = http_client
        self._owned_client: httpx.AsyncClient | None = None

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client

        if self._owned_client is None or self._owned_client.is_closed:
            self._owned_client = httpx.AsyncClient(timeout=self.config.http_timeout)
        return self._owned_client

    def _headers(self, credential: str, with_body: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": f"Basic {credential}",
            "Accept": "application/json",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _log_request(self, method: str, url: str, headers: dict[str, str], body: Any = None) -> None:
        logger.debug("Provider request: %s %s headers=%s", method, url, mask_headers(headers))
        if body is not None and self.config.log_http_bodies:
            logger.debug("Provider request body: %s", json.dumps(body))

    def _log_response(self, response: httpx.Response) -> None:
        logger.debug(
            "Provider response: %s %s -> %d",
            response.request.method,
            response.request.url,
            response.status_code,
        )
        if self.config.log_http_bodies:
            logger.debug("Provider response body: %s", response.text[:2000])

    def _api_error(self, response: httpx.Response) -> PaymentApiError:
        message, body = extract_error_message(response)
        logger.error("Payment API error: %s", message)
        return PaymentApiError(
            status_code=response.status_code,
            message=message,
            response_body=body,
        )

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
        """Create payment via POST /v2/payments."""
        credential = self.secret_provider.get_credential(environment)

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
        body = request.to_wire()
        url = f"{environment.base_url(self.config)}{PAYMENTS_PATH}"
        headers = self._headers(credential, with_body=True)

        self._log_request("POST", url, headers, body)

        # Other request errors propagate unchanged
        try:
            response = await self._client().post(url, json=body, headers=headers)
        except httpx.DecodingError as e:
            logger.error("Payment response decoding error: %s", e)
            raise PaymentDecodingError(message=f"Failed to decode response: {e}") from e

        self._log_response(response)

        if not response.is_success:
            raise self._api_error(response)

        try:
            payment = PaymentResponse.model_validate_json(response.content).payment
        except ValidationError as e:
            logger.error("Payment decoding error: %s", e)
            raise PaymentDecodingError(
                message=f"Failed to decode response: {e}",
                raw_body=response.text,
            ) from e

        logger.info(
            "Payment initiated: id=%s, ref_id=%s, status=%s",
            payment.id,
            request.initiation.ref_id,
            payment.status,
        )

        return PaymentInitiation(
            redirect_url=payment.authentication.redirect_url,
            state=state,
            ref_id=request.initiation.ref_id,
            payment_id=payment.id,
        )

    async def get_payment_status(
        self,
        payment_id: str,
        environment: ApiEnvironment,
    ) -> PaymentStatusDetails:
        """Fetch status via GET /v2/payments/{id}."""
        credential = self.secret_provider.get_credential(environment)

        url = f"{environment.base_url(self.config)}{PAYMENTS_PATH}/{quote(payment_id, safe='')}"
        headers = self._headers(credential)

        self._log_request("GET", url, headers)

        try:
            response = await self._client().get(url, headers=headers)
        except httpx.DecodingError as e:
            logger.error("Payment status decoding error: %s", e)
            raise PaymentDecodingError(message=f"Failed to decode payment status response: {e}") from e
        except httpx.RequestError as e:
            logger.error("Payment status network error: %s", e)
            raise PaymentNetworkError(e) from e

        self._log_response(response)

        if not response.is_success:
            raise self._api_error(response)

        try:
            status_response = PaymentStatusResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("Payment status decoding error: %s", e)
            raise PaymentDecodingError(
                message=f"Failed to decode payment status response: {e}",
                raw_body=response.text,
            ) from e

        return PaymentStatusDetails.from_response(status_response)

    async def aclose(self) -> None:
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None
