"""Base payment API client interface."""

from abc import ABC, abstractmethod

from checkout.payments.environments import ApiEnvironment
from checkout.payments.schemas import PaymentInitiation, PaymentStatusDetails


class PaymentApiClient(ABC):
    """Abstract client for the provider's payments API.

    All implementations (live, mock) must implement this interface.
    """

    @abstractmethod
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
        """Create a payment and return where to send the user.

        Args:
            environment: Provider environment
            currency: ISO 4217 code
            amount_value: Decimal amount as string
            local_instrument: Payment rail, e.g. FASTER_PAYMENTS
            creditor_name: Payee name
            creditor_iban: Payee IBAN (SEPA)
            creditor_sort_code: Payee sort code (UK)
            creditor_account_number: Payee account number (UK)

        Returns:
            Redirect URL plus the generated state the caller must keep

        Raises:
            MissingCredentialError: No credential; nothing is sent
            CredentialFormatError: Credential unusable; nothing is sent
            httpx.RequestError: Transport or redirect failure, not wrapped
            PaymentApiError: Non-2xx response
            PaymentDecodingError: Body, content encoding or redirect URL could not be decoded
        """

    @abstractmethod
    async def get_payment_status(
        self,
        payment_id: str,
        environment: ApiEnvironment,
    ) -> PaymentStatusDetails:
        """Fetch current payment status.

        Raises (mutually exclusive, in this priority):
            MissingCredentialError / CredentialFormatError
            PaymentNetworkError
            PaymentApiError
            PaymentDecodingError
        """

    async def aclose(self) -> None:
        """Release resources held by the client."""
