"""Payment API schemas."""

from pydantic import BaseModel, Field, model_validator

from checkout.payments.environments import ApiEnvironment
from checkout.payments.status import PaymentStatus
from checkout.services.flow import FlowPhase, PaymentFlowState


class CreatePaymentRequest(BaseModel):
    """Request to start a hosted checkout payment.

    ``amount_value`` is forwarded as-is; the provider rejects bad amounts.
    """

    environment: ApiEnvironment | None = Field(
        None,
        description="Provider environment (defaults to configured one)",
    )
    currency: str = Field(..., min_length=3, max_length=3, description="ISO 4217 code")
    amount_value: str = Field(..., min_length=1, description="Decimal amount as string")
    local_instrument: str = Field(..., min_length=1, examples=["FASTER_PAYMENTS", "SEPA_INSTANT"])
    creditor_name: str = Field(..., min_length=1, max_length=140)
    creditor_iban: str | None = None
    creditor_sort_code: str | None = None
    creditor_account_number: str | None = None

    @model_validator(mode="after")
    def _check_account(self) -> "CreatePaymentRequest":
        has_iban = bool(self.creditor_iban)
        has_uk = bool(self.creditor_sort_code and self.creditor_account_number)
        if has_iban == has_uk:
            raise ValueError("Provide either creditor_iban or creditor_sort_code + creditor_account_number")
        return self


class CreatePaymentResponse(BaseModel):
    """Started payment. ``redirect_url`` goes to the browser."""

    flow_id: str
    redirect_url: str
    ref_id: str
    state: str


class FlowStateResponse(BaseModel):
    """Snapshot of a payment flow."""

    flow_id: str | None
    phase: FlowPhase
    ref_id: str | None
    payment_id: str | None
    status: PaymentStatus | None
    status_string: str
    reason: str | None
    error_code: str | None
    currency: str
    value: str
    is_checking: bool
    polling_error: str | None
    unmapped_status: str | None

    @classmethod
    def from_state(cls, flow_id: str | None, state: PaymentFlowState) -> "FlowStateResponse":
        return cls(
            flow_id=flow_id,
            phase=state.phase,
            ref_id=state.ref_id,
            payment_id=state.payment_id,
            status=state.status,
            status_string=state.status_string,
            reason=state.reason,
            error_code=state.error_code,
            currency=state.currency,
            value=state.value,
            is_checking=state.is_checking,
            polling_error=state.polling_error,
            unmapped_status=state.unmapped_status,
        )


class ErrorResponse(BaseModel):
    """Error response."""

    error: str  # Error code
    message: str  # Human-readable message
    details: dict | None = None
