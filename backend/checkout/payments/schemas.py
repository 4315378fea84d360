"""Payment schemas for provider communication.

Wire models use the provider's camelCase field names; Python code uses
snake_case attributes. Serialize with ``to_wire()`` so optional fields that
are not set are omitted instead of sent as ``null``.
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for provider JSON bodies."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump with provider field names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Amount(WireModel):
    """Money amount. ``value`` is a decimal string as the provider expects."""

    value: str
    currency: str = Field(..., description="ISO 4217 code")


class Creditor(WireModel):
    """Payee account.

    Exactly one of ``iban`` or ``sort_code`` + ``account_number`` is expected
    by the provider; the model itself does not enforce it.
    """

    name: str | None = None
    iban: str | None = None
    sort_code: str | None = None
    account_number: str | None = None


class Initiation(WireModel):
    """Payment initiation block sent on create."""

    bank_id: str | None = None
    ref_id: str
    flow_type: str
    remittance_information_primary: str
    remittance_information_secondary: str
    amount: Amount
    local_instrument: str
    creditor: Creditor
    callback_url: str
    callback_state: str


class PaymentRequest(WireModel):
    """Body of POST /v2/payments."""

    initiation: Initiation
    pisp_consent_accepted: bool = True


class Authentication(WireModel):
    """Hosted checkout step returned on create."""

    redirect_url: str

    @field_validator("redirect_url")
    @classmethod
    def _check_redirect_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"Invalid redirect URL received in response: {value!r}")
        return value


class EchoedInitiation(WireModel):
    """Initiation as echoed back by the provider.

    Most fields are optional because the GET response omits some of them.
    """

    bank_id: str | None = None
    ref_id: str
    flow_type: str | None = None
    remittance_information_primary: str | None = None
    remittance_information_secondary: str | None = None
    amount: Amount
    local_instrument: str | None = None
    creditor: Creditor | None = None
    callback_url: str | None = None
    callback_state: str | None = None


class Payment(WireModel):
    """Payment envelope shared by create and get responses."""

    id: str
    member_id: str | None = None
    initiation: EchoedInitiation
    created_date_time: str | None = None
    updated_date_time: str | None = None
    status: str
    status_reason_information: str | None = None


class CreatedPayment(Payment):
    """Payment envelope of the create response."""

    authentication: Authentication


class PaymentResponse(WireModel):
    """Response of POST /v2/payments."""

    payment: CreatedPayment


class PaymentStatusResponse(WireModel):
    """Response of GET /v2/payments/{id}. Has no authentication block."""

    payment: Payment


class PaymentStatusDetails(BaseModel):
    """Projection of the status response used by the poller."""

    model_config = ConfigDict(frozen=True)

    status: str = Field(..., description="Raw provider status")
    status_reason_information: str | None = None
    currency: str
    value: str
    ref_id: str

    @classmethod
    def from_response(cls, response: PaymentStatusResponse) -> "PaymentStatusDetails":
        payment = response.payment
        return cls(
            status=payment.status,
            status_reason_information=payment.status_reason_information,
            currency=payment.initiation.amount.currency,
            value=payment.initiation.amount.value,
            ref_id=payment.initiation.ref_id,
        )


@dataclass(frozen=True)
class PaymentInitiation:
    """Result of a successful create call.

    The caller must keep ``state`` as the expected correlation token before
    sending the user to ``redirect_url``.
    """

    redirect_url: str
    state: str
    ref_id: str
    payment_id: str


@dataclass(frozen=True)
class CallbackParams:
    """Fields extracted from an inbound callback URI."""

    payment_id: str | None
    state: str | None
    extra: dict[str, str] = field(default_factory=dict)
